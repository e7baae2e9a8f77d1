from fastapi import APIRouter, File, Form, Request, UploadFile
from starlette.concurrency import run_in_threadpool
from typing import List, Optional
import logging
import time

from app.core.exceptions import AppException
from app.schemas.synthesis import ReviewInputs, SynthesisResult
from app.services.extraction import UploadedFile
from app.services.synthesis import synthesize_review, synthesize_uploads

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/synthesize", tags=["synthesis"])

FORM_CONTENT_TYPES = ("multipart/form-data", "application/x-www-form-urlencoded")


async def _read_uploads(files: Optional[List[UploadFile]]) -> List[UploadedFile]:
    uploads = []
    for f in files or []:
        data = await f.read()
        # Browsers submit empty file inputs as a nameless, zero-byte part
        if not f.filename and not data:
            continue
        uploads.append(UploadedFile(filename=f.filename or "", content_type=f.content_type, data=data))
    return uploads


@router.post("", response_model=SynthesisResult)
async def synthesize(
    request: Request,
    employee_images: List[UploadFile] = File(default=[], alias="itpEmployeeScreenshots"),
    manager_images: List[UploadFile] = File(default=[], alias="itpManagerScreenshots"),
    feedback_document: Optional[UploadFile] = File(default=None, alias="feedback360"),
    self_review_images: List[UploadFile] = File(default=[], alias="selfReviewScreenshots"),
    manager_comments: str = Form(default="", alias="managerComments"),
):
    """
    Synthesize a performance review from uploaded assessments and comments.

    Every field is optional. External service failures never fail the
    request: the response then carries the deterministic fallback text.
    """
    content_type = request.headers.get("content-type", "")
    if not content_type.startswith(FORM_CONTENT_TYPES):
        raise AppException(
            "Request must be submitted as multipart/form-data",
            status_code=415,
            error_code="UNSUPPORTED_MEDIA_TYPE",
        )

    start = time.time()
    feedback = await _read_uploads([feedback_document] if feedback_document else [])
    result = await run_in_threadpool(
        synthesize_uploads,
        await _read_uploads(employee_images),
        await _read_uploads(manager_images),
        feedback[0] if feedback else None,
        await _read_uploads(self_review_images),
        manager_comments,
    )
    logger.info(
        f"Synthesis complete in {time.time() - start:.2f}s",
        extra={"source": result.source, "data_used": result.data_used.model_dump(by_alias=True)},
    )
    return result


@router.post("/text", response_model=SynthesisResult)
def synthesize_text(inputs: ReviewInputs):
    """Synthesize from already-extracted scores and text (no uploads)."""
    return synthesize_review(inputs)
