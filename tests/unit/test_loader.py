"""Unit tests for the knowledge loader."""

import json

import pytest

from src.ingestion.loader import documents_from_data, load_documents

SAMPLE = {
    "company_info": {
        "name": "Aven",
        "description": "Aven offers a home equity credit card.",
        "contact": {"phone": "(415) 523-0580", "email": "support@aven.com"},
    },
    "key_features": {"credit_line": "Up to $250,000", "no_fees": "No annual fee"},
    "trending_questions": ["What is Aven?", "How do I apply?"],
    "faq_categories": ["Application", "Payments"],
    "faqs": [
        {"category": "Application", "question": "How do I apply?", "answer": "Apply online."},
        {"category": "Application", "question": "Is there a fee?", "answer": "No."},
        {"category": "Payments", "question": "How do I pay?", "answer": "Use autopay."},
        {"category": "Payments", "question": "", "answer": "Orphan answer."},
    ],
}


class TestDocumentsFromData:
    def test_all_sections(self):
        docs = documents_from_data(SAMPLE)
        sources = [d.source for d in docs]

        assert sources.count("company_info") == 1
        assert sources.count("features") == 1
        assert sources.count("faq") == 1
        assert sources.count("support_categories") == 1
        assert sources.count("detailed_faq") == 2
        assert sources.count("individual_faq") == 3

    def test_company_overview_includes_contact(self):
        overview = documents_from_data(SAMPLE)[0]
        assert overview.title == "Aven Company Overview"
        assert "Phone: (415) 523-0580" in overview.content
        assert "Email: support@aven.com" in overview.content

    def test_detailed_faq_groups_by_category(self):
        docs = [d for d in documents_from_data(SAMPLE) if d.source == "detailed_faq"]
        application = next(d for d in docs if d.title.startswith("Application"))

        assert application.metadata == {"category": "application", "faq_count": 2}
        assert "Q: How do I apply?\nA: Apply online." in application.content

    def test_individual_faq(self):
        docs = [d for d in documents_from_data(SAMPLE) if d.source == "individual_faq"]
        assert docs[0].title == "Application FAQ: How do I apply?"
        assert docs[0].content == "Question: How do I apply?\n\nAnswer: Apply online."
        assert docs[0].document_id == "individual_faq_Application_FAQ:_How_do_I_apply?"

    def test_same_question_in_two_categories_gets_two_ids(self):
        data = {"faqs": [
            {"category": "Payments", "question": "Is there a fee?", "answer": "No late fee."},
            {"category": "Application", "question": "Is there a fee?", "answer": "No application fee."},
        ]}
        docs = [d for d in documents_from_data(data) if d.source == "individual_faq"]
        assert len({d.document_id for d in docs}) == 2

    def test_exact_duplicate_faq_is_skipped(self, caplog):
        faq = {"category": "Payments", "question": "How do I pay?", "answer": "Use autopay."}
        docs = [d for d in documents_from_data({"faqs": [faq, dict(faq)]}) if d.source == "individual_faq"]
        assert len(docs) == 1
        assert "Skipping duplicate FAQ" in caplog.text

    def test_missing_sections_are_skipped(self):
        assert documents_from_data({}) == []
        docs = documents_from_data({"faqs": [{"question": "Q?", "answer": "A."}]})
        assert [d.source for d in docs] == ["detailed_faq", "individual_faq"]
        assert docs[0].metadata["category"] == "general"


class TestLoadDocuments:
    def test_reads_file(self, tmp_path):
        path = tmp_path / "data.json"
        path.write_text(json.dumps(SAMPLE))
        assert len(load_documents(path)) == 9

    def test_missing_file(self, tmp_path):
        with pytest.raises(ValueError, match="Failed to load knowledge data"):
            load_documents(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{not json")
        with pytest.raises(ValueError, match="Failed to load knowledge data"):
            load_documents(path)

    def test_non_object(self, tmp_path):
        path = tmp_path / "list.json"
        path.write_text("[]")
        with pytest.raises(ValueError, match="Failed to load knowledge data"):
            load_documents(path)
