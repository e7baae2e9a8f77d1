"""
Input extraction: turn uploaded screenshots and documents into scores and text.

Screenshots go to the vision-capable completion service; the 360 document is
read locally. Every failure here demotes the category to "unavailable"
(``None``) instead of failing the request. Only an upload that breaks the
type/size rules is rejected outright.
"""
import io
import json
import logging
import os
import re
from dataclasses import dataclass
from typing import List, Optional

import PyPDF2
import docx
from pydantic import ValidationError

from app.core import prompts
from app.core.config import settings
from app.core.exceptions import AIError, InvalidUploadError
from app.schemas.synthesis import ITPScores
from app.services.completion_client import call_completion, image_block, text_block

logger = logging.getLogger(__name__)

DOCUMENT_EXTENSIONS = {".pdf", ".docx", ".txt"}
IMAGE_MEDIA_TYPES = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".webp": "image/webp",
}

_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)
_JSON_OBJECT_RE = re.compile(r"\{.*\}", re.DOTALL)


@dataclass
class UploadedFile:
    filename: str
    content_type: Optional[str]
    data: bytes

    @property
    def extension(self) -> str:
        return os.path.splitext(self.filename or "")[1].lower()


def _check_size(upload: UploadedFile) -> None:
    if len(upload.data) > settings.max_upload_bytes:
        raise InvalidUploadError(
            f"{upload.filename}: file size must be less than {settings.max_upload_mb}MB"
        )


def validate_image(upload: UploadedFile) -> str:
    """Return the image media type, or raise InvalidUploadError."""
    _check_size(upload)
    if upload.content_type and upload.content_type.startswith("image/"):
        return upload.content_type
    media_type = IMAGE_MEDIA_TYPES.get(upload.extension)
    if not media_type:
        raise InvalidUploadError(f"{upload.filename}: file must be an image (png, jpg, gif, webp)")
    return media_type


def validate_document(upload: UploadedFile) -> None:
    _check_size(upload)
    if upload.extension not in DOCUMENT_EXTENSIONS:
        raise InvalidUploadError(
            f"{upload.filename}: file type {upload.extension or 'unknown'} not allowed. "
            f"Allowed: {', '.join(sorted(DOCUMENT_EXTENSIONS))}"
        )


def parse_scores_json(text: str) -> Optional[ITPScores]:
    """
    Read a {"humble", "hungry", "smart"} object out of a model reply.

    Tolerates markdown fences and prose around the object; anything that does
    not yield three integers in 1-10 returns None.
    """
    cleaned = _FENCE_RE.sub("", text.strip())
    match = _JSON_OBJECT_RE.search(cleaned)
    if not match:
        logger.warning("No JSON object found in score extraction reply")
        return None
    try:
        raw = json.loads(match.group())
        # {"scores": {"humble": 8, ...}} and similar single-key wrappers
        if len(raw) == 1:
            inner = next(iter(raw.values()))
            if isinstance(inner, dict):
                raw = inner
        return ITPScores(**{k.lower(): v for k, v in raw.items()})
    except (json.JSONDecodeError, AttributeError, TypeError, ValidationError) as e:
        logger.warning(f"Could not parse ITP scores from reply: {e}")
        return None


def _vision_call(images: List[UploadedFile], instruction: str) -> Optional[str]:
    blocks = [text_block(instruction)]
    for image in images:
        blocks.append(image_block(image.data, validate_image(image)))
    try:
        return call_completion(blocks, max_tokens=settings.ai.extraction_max_tokens, temperature=0)
    except AIError as e:
        logger.warning(f"Extraction call failed: {e.message}")
        return None


def extract_itp_scores(images: List[UploadedFile]) -> Optional[ITPScores]:
    """Read an ITP score triple from assessment screenshots."""
    if not images:
        return None
    reply = _vision_call(images, prompts.ITP_SCORES_EXTRACTION)
    if reply is None:
        return None
    return parse_scores_json(reply)


def extract_self_review_text(images: List[UploadedFile]) -> Optional[str]:
    """Transcribe self-review screenshots to text."""
    if not images:
        return None
    reply = _vision_call(images, prompts.SELF_REVIEW_EXTRACTION)
    if reply is None:
        return None
    return reply.strip() or None


def extract_document_text(upload: UploadedFile) -> Optional[str]:
    """Extract text from a PDF, DOCX or TXT 360 feedback document."""
    validate_document(upload)
    text = ""
    try:
        if upload.extension == ".pdf":
            reader = PyPDF2.PdfReader(io.BytesIO(upload.data))
            for page in reader.pages:
                text += (page.extract_text() or "") + "\n"
        elif upload.extension == ".docx":
            document = docx.Document(io.BytesIO(upload.data))
            for paragraph in document.paragraphs:
                text += paragraph.text + "\n"
        else:
            text = upload.data.decode("utf-8", errors="ignore")
    except Exception as e:
        # Corrupt or encrypted files: treat the document as absent
        logger.warning(f"Text extraction failed for {upload.filename}: {e}")
        return None

    text = text.strip()
    if not text:
        logger.warning(f"No text extracted from {upload.filename}")
        return None
    return text
