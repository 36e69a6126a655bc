"""Load support knowledge from a structured JSON export into Documents."""

import json
import logging
from collections import defaultdict
from pathlib import Path

from src.models.document import Document

logger = logging.getLogger(__name__)


def _category_key(category: str) -> str:
    return "_".join(category.lower().split())


def _company_document(company: dict) -> Document | None:
    description = company.get("description", "").rstrip(".")
    if not description:
        return None
    contact = company.get("contact", {})
    parts = [f"{description}."]
    contact_bits = [
        f"{label}: {contact[key]}"
        for key, label in (("phone", "Phone"), ("support_phone", "Support"), ("email", "Email"))
        if contact.get(key)
    ]
    if contact_bits:
        parts.append(f"Contact information: {', '.join(contact_bits)}.")
    if contact.get("corporate_address"):
        parts.append(f"Corporate address: {contact['corporate_address']}.")
    name = company.get("name", "Company")
    return Document(
        title=f"{name} Company Overview",
        content=" ".join(parts),
        source="company_info",
        metadata={"category": "overview"},
    )


def documents_from_data(data: dict) -> list[Document]:
    """Build knowledge documents from the support-data structure.

    Expected keys (all optional): company_info, key_features,
    trending_questions, faq_categories, faqs. Each FAQ is a dict with
    category, question and answer.
    """
    documents: list[Document] = []
    company = data.get("company_info", {})
    name = company.get("name", "Company")

    overview = _company_document(company)
    if overview:
        documents.append(overview)

    features = data.get("key_features", {})
    if features:
        documents.append(Document(
            title=f"{name} Card Features and Benefits",
            content=". ".join(f"{key.replace('_', ' ')}: {value}" for key, value in features.items()),
            source="features",
            metadata={"category": "features"},
        ))

    trending = data.get("trending_questions", [])
    if trending:
        numbered = " ".join(f"{i}. {q}" for i, q in enumerate(trending, 1))
        documents.append(Document(
            title="Frequently Asked Questions",
            content=f"Common questions about {name}: {numbered}",
            source="faq",
            metadata={"category": "faq"},
        ))

    categories = data.get("faq_categories", [])
    if categories:
        documents.append(Document(
            title="Support Categories",
            content=(
                f"{name} provides support in the following areas: {', '.join(categories)}. "
                "For detailed questions in these areas, customers can visit the support "
                "page or contact customer service."
            ),
            source="support_categories",
            metadata={"category": "support"},
        ))

    faqs = [f for f in data.get("faqs", []) if f.get("question") and f.get("answer")]
    by_category: dict[str, list[dict]] = defaultdict(list)
    for faq in faqs:
        by_category[faq.get("category") or "General"].append(faq)

    for category, items in by_category.items():
        documents.append(Document(
            title=f"{category} - Frequently Asked Questions",
            content="\n\n".join(f"Q: {f['question']}\nA: {f['answer']}" for f in items),
            source="detailed_faq",
            metadata={"category": _category_key(category), "faq_count": len(items)},
        ))

    seen: set[str] = set()
    for faq in faqs:
        category = faq.get("category") or "General"
        document = Document(
            title=f"{category} FAQ: {faq['question']}",
            content=f"Question: {faq['question']}\n\nAnswer: {faq['answer']}",
            source="individual_faq",
            metadata={"category": _category_key(category), "question_type": "faq"},
        )
        if document.document_id in seen:
            logger.warning("Skipping duplicate FAQ %r in %s", faq["question"], category)
            continue
        seen.add(document.document_id)
        documents.append(document)

    return documents


def load_documents(path: Path | str) -> list[Document]:
    """Read a support-data JSON file and convert it to Documents.

    Raises:
        ValueError: If the file cannot be read or is not a JSON object.
    """
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ValueError(f"Failed to load knowledge data: {e}") from e
    if not isinstance(data, dict):
        raise ValueError("Failed to load knowledge data: top-level JSON value must be an object")

    documents = documents_from_data(data)
    logger.info("Loaded %d documents from %s", len(documents), path)
    return documents
