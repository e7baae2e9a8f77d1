import io

import docx
import pytest

from app.core.exceptions import AIError, InvalidUploadError
from app.schemas.synthesis import ITPScores
from app.services.extraction import (
    UploadedFile,
    extract_document_text,
    extract_itp_scores,
    extract_self_review_text,
    parse_scores_json,
    validate_image,
)


def _png(name="scores.png"):
    return UploadedFile(filename=name, content_type="image/png", data=b"\x89PNG\r\n")


@pytest.mark.parametrize("reply", [
    '{"humble": 8, "hungry": 7, "smart": 9}',
    '```json\n{"humble": 8, "hungry": 7, "smart": 9}\n```',
    'Here are the scores: {"Humble": 8, "Hungry": 7, "Smart": 9}. Let me know!',
    '{"humble": "8", "hungry": "7", "smart": "9"}',
    '{"scores": {"humble": 8, "hungry": 7, "smart": 9}}',
    'Scores below.\n```json\n{"itp": {"Humble": 8, "Hungry": 7, "Smart": 9}}\n```',
])
def test_parse_scores_json_accepts_common_shapes(reply):
    assert parse_scores_json(reply) == ITPScores(humble=8, hungry=7, smart=9)


@pytest.mark.parametrize("reply", [
    "I could not read the image.",
    '{"humble": 8, "hungry": 7}',
    '{"humble": 12, "hungry": 7, "smart": 9}',
    '{"humble": 8, hungry: 7, "smart": 9}',
    "[8, 7, 9]",
])
def test_parse_scores_json_rejects_unusable_replies(reply):
    assert parse_scores_json(reply) is None


def test_extract_itp_scores_sends_images(completion):
    completion.handler = lambda content, kwargs: '{"humble": 6, "hungry": 9, "smart": 7}'

    scores = extract_itp_scores([_png("a.png"), _png("b.png")])

    assert scores == ITPScores(humble=6, hungry=9, smart=7)
    content, kwargs = completion.calls[0]
    assert content[0]["type"] == "text"
    assert [block["type"] for block in content[1:]] == ["image_url", "image_url"]
    assert kwargs["temperature"] == 0


def test_extract_itp_scores_service_failure_is_unavailable(completion):
    def fail(content, kwargs):
        raise AIError("AI service returned error: 500")
    completion.handler = fail

    assert extract_itp_scores([_png()]) is None


def test_extract_itp_scores_without_images_makes_no_call(completion):
    assert extract_itp_scores([]) is None
    assert completion.calls == []


def test_extract_self_review_text(completion):
    completion.handler = lambda content, kwargs: "  Q: Biggest win?\nA: The billing rewrite.  "

    assert extract_self_review_text([_png("self.png")]) == "Q: Biggest win?\nA: The billing rewrite."


def test_extract_self_review_blank_reply_is_unavailable(completion):
    completion.handler = lambda content, kwargs: "   "
    assert extract_self_review_text([_png()]) is None


def test_validate_image_by_extension():
    upload = UploadedFile(filename="shot.JPG", content_type="application/octet-stream", data=b"x")
    assert validate_image(upload) == "image/jpeg"


def test_validate_image_rejects_non_images():
    with pytest.raises(InvalidUploadError):
        validate_image(UploadedFile(filename="notes.txt", content_type="text/plain", data=b"x"))


def test_validate_image_rejects_large_files(monkeypatch):
    from app.core.config import settings
    monkeypatch.setattr(settings, "max_upload_mb", 1)
    big = UploadedFile(filename="big.png", content_type="image/png", data=b"0" * (1024 * 1024 + 1))
    with pytest.raises(InvalidUploadError, match="1MB"):
        validate_image(big)


def test_extract_text_document():
    upload = UploadedFile(filename="360.txt", content_type="text/plain", data=b"  Great collaborator.  ")
    assert extract_document_text(upload) == "Great collaborator."


def test_extract_docx_document():
    document = docx.Document()
    document.add_paragraph("Consistently strategic.")
    document.add_paragraph("Needs better follow-through.")
    buffer = io.BytesIO()
    document.save(buffer)

    upload = UploadedFile(filename="360.docx", content_type=None, data=buffer.getvalue())

    assert extract_document_text(upload) == "Consistently strategic.\nNeeds better follow-through."


def test_corrupt_pdf_is_unavailable():
    upload = UploadedFile(filename="360.pdf", content_type="application/pdf", data=b"not a pdf")
    assert extract_document_text(upload) is None


def test_empty_document_is_unavailable():
    assert extract_document_text(UploadedFile(filename="360.txt", content_type=None, data=b"   ")) is None


def test_document_type_is_checked():
    with pytest.raises(InvalidUploadError, match="not allowed"):
        extract_document_text(UploadedFile(filename="360.xlsx", content_type=None, data=b"x"))
