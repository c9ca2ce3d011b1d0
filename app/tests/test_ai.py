import io
import json

import pytest
from pypdf import PdfWriter

from app.core.errors import ExtractionError
from app.services import ai
from app.services.ai import StructuredExtractor, pdf_to_text

RESUME = {
    "full_name": "Jane Doe",
    "email": "jane@x.com",
    "phone": "+91 99999 99999",
    "location": "Pune, Maharashtra",
    "address": "12 MG Road",
    "education": "B.Tech, Computer Science",
    "experience": "2 years backend development",
}


def blank_pdf() -> bytes:
    writer = PdfWriter()
    writer.add_blank_page(width=200, height=200)
    out = io.BytesIO()
    writer.write(out)
    return out.getvalue()


# -------------------------
# Extractor
# -------------------------

def test_job_description_parsed(fake_llm):
    reply = {
        "highlight_points": ["Remote friendly"],
        "sections": [{"title": "Responsibilities", "points": ["Build APIs", "Review code"]}],
    }
    llm = fake_llm(json.dumps(reply))
    extractor = StructuredExtractor(llm, model="test-model")

    result = extractor.parse_job_description("We are hiring...")

    assert result.highlight_points == ["Remote friendly"]
    assert result.sections[0].points == ["Build APIs", "Review code"]
    call = llm.chat.completions.calls[0]
    assert call["response_format"] == {"type": "json_object"}
    assert "We are hiring..." in call["messages"][1]["content"]


def test_empty_sections_rejected(fake_llm):
    extractor = StructuredExtractor(fake_llm(json.dumps({"sections": []})), model="test-model")
    with pytest.raises(ExtractionError):
        extractor.parse_job_description("About us only")


@pytest.mark.parametrize("reply", ["not json", json.dumps({"icon": "Code"}), ""])
def test_malformed_replies_rejected(fake_llm, reply):
    extractor = StructuredExtractor(fake_llm(reply), model="test-model")
    with pytest.raises(ExtractionError):
        extractor.suggest_icon("Software Engineer")


def test_unreadable_pdf():
    with pytest.raises(ExtractionError):
        pdf_to_text(b"definitely not a pdf")


def test_pdf_without_text():
    with pytest.raises(ExtractionError) as exc:
        pdf_to_text(blank_pdf())
    assert exc.value.message == "No text could be extracted from the resume."


# -------------------------
# API
# -------------------------

def test_icon_endpoint(client, override_extractor):
    override_extractor(json.dumps({"icon_name": "Code"}))
    response = client.post("/api/v1/ai/icon", json={"job_title": "Software Engineer"})
    assert response.json() == {"success": True, "data": {"icon_name": "Code"}}


def test_resume_endpoint(client, override_extractor, monkeypatch):
    monkeypatch.setattr(ai, "pdf_to_text", lambda data: "Jane Doe jane@x.com")
    override_extractor(json.dumps(RESUME))

    response = client.post(
        "/api/v1/ai/resume",
        files={"file": ("cv.pdf", b"%PDF-1.4", "application/pdf")},
    )
    assert response.status_code == 200
    assert response.json()["data"]["full_name"] == "Jane Doe"


def test_failure_envelope(client, override_extractor):
    override_extractor("garbage")
    response = client.post("/api/v1/ai/job-description", json={"job_description": "text"})
    assert response.status_code == 500
    assert response.json() == {"success": False, "error": "AI response was in an unexpected format."}
