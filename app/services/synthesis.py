"""
Review synthesis pipeline.

collect inputs -> extract scores/text from uploads -> prompt the completion
service -> split the reply into four sections. Any failure of the external
service, or a reply the splitter cannot use, degrades to the deterministic
fallback text; callers always receive four populated sections.
"""
import logging
from typing import List, Optional

from app.core import prompts
from app.core.config import settings
from app.core.exceptions import AIError
from app.schemas.synthesis import (
    DataUsed, ExtractedData, ExtractionState, ExtractionStatus, ReviewInputs, SynthesisResult
)
from app.services.completion_client import call_completion
from app.services.extraction import (
    UploadedFile,
    extract_document_text,
    extract_itp_scores,
    extract_self_review_text,
    validate_document,
    validate_image,
)
from app.services.fallback import build_fallback
from app.services.itp_analysis import analyze_itp_scores
from app.services.section_parser import found_any_section, split_sections

logger = logging.getLogger(__name__)


def compute_data_used(inputs: ReviewInputs) -> DataUsed:
    return DataUsed(
        itp_scores=inputs.itp_self_scores is not None or inputs.itp_manager_scores is not None,
        feedback_360=bool(inputs.feedback_360_text.strip()),
        self_review=bool(inputs.self_review_text.strip()),
        manager_comments=bool(inputs.manager_comments.strip()),
    )


def _format_scores(scores) -> str:
    return f"Humble: {scores.humble}/10, Hungry: {scores.hungry}/10, Smart: {scores.smart}/10"


def build_prompt(inputs: ReviewInputs, data_used: DataUsed) -> str:
    blocks = []
    if data_used.itp_scores:
        lines = []
        if inputs.itp_self_scores:
            lines.append(f"Employee self assessment - {_format_scores(inputs.itp_self_scores)}")
        if inputs.itp_manager_scores:
            lines.append(f"Manager assessment - {_format_scores(inputs.itp_manager_scores)}")
        analysis = analyze_itp_scores(inputs.itp_self_scores, inputs.itp_manager_scores)
        lines.append(analysis.summary())
        blocks.append(prompts.get_prompt(
            prompts.SOURCE_BLOCK_TEMPLATE, title="ITP ASSESSMENT", content="\n".join(lines)
        ))
    if data_used.feedback_360:
        blocks.append(prompts.get_prompt(
            prompts.SOURCE_BLOCK_TEMPLATE, title="360 FEEDBACK", content=inputs.feedback_360_text.strip()
        ))
    if data_used.self_review:
        blocks.append(prompts.get_prompt(
            prompts.SOURCE_BLOCK_TEMPLATE, title="SELF REVIEW", content=inputs.self_review_text.strip()
        ))
    if data_used.manager_comments:
        blocks.append(prompts.get_prompt(
            prompts.SOURCE_BLOCK_TEMPLATE, title="MANAGER COMMENTS", content=inputs.manager_comments.strip()
        ))

    available = ", ".join(data_used.source_names()) or "none"
    return prompts.get_prompt(
        prompts.SYNTHESIS_USER_TEMPLATE,
        available_sources=available,
        source_blocks="\n\n".join(blocks) or "No source material was supplied.",
    )


def synthesize_review(
    inputs: ReviewInputs, extracted_data: Optional[ExtractedData] = None
) -> SynthesisResult:
    data_used = compute_data_used(inputs)

    def fallback() -> SynthesisResult:
        return SynthesisResult.from_sections(
            build_fallback(data_used, inputs), data_used,
            extracted_data=extracted_data, source="fallback",
        )

    if not data_used.any() and settings.ai.skip_when_empty:
        logger.info("No review inputs supplied; returning fallback without calling the AI service")
        return fallback()

    try:
        reply = call_completion(build_prompt(inputs, data_used), system=prompts.SYNTHESIS_SYSTEM)
    except AIError as e:
        logger.warning(f"Synthesis call failed, using fallback: {e.message}", extra={"code": e.error_code})
        return fallback()

    sections = split_sections(reply)
    if not found_any_section(sections):
        logger.warning("AI reply had no recognizable sections, using fallback")
        return fallback()

    return SynthesisResult.from_sections(
        sections, data_used,
        extracted_data=extracted_data, source="ai", model=settings.ai.model_name,
    )


def _extraction_state(uploaded: bool, value) -> ExtractionState:
    if not uploaded:
        return "skipped"
    return "complete" if value is not None else "failed"


def synthesize_uploads(
    employee_images: List[UploadedFile],
    manager_images: List[UploadedFile],
    feedback_document: Optional[UploadedFile],
    self_review_images: List[UploadedFile],
    manager_comments: str = "",
) -> SynthesisResult:
    """Run the full pipeline over a multipart submission."""
    # Reject bad uploads before spending any external calls
    for image in employee_images + manager_images + self_review_images:
        validate_image(image)
    if feedback_document is not None:
        validate_document(feedback_document)

    self_scores = extract_itp_scores(employee_images)
    manager_scores = extract_itp_scores(manager_images)
    self_review_text = extract_self_review_text(self_review_images)
    feedback_text = extract_document_text(feedback_document) if feedback_document else None

    status = ExtractionStatus(
        itp_employee=_extraction_state(bool(employee_images), self_scores),
        itp_manager=_extraction_state(bool(manager_images), manager_scores),
        feedback_360=_extraction_state(feedback_document is not None, feedback_text),
        self_review=_extraction_state(bool(self_review_images), self_review_text),
    )
    logger.info("Extraction finished", extra=status.model_dump(by_alias=True))

    inputs = ReviewInputs(
        itp_self_scores=self_scores,
        itp_manager_scores=manager_scores,
        feedback_360_text=feedback_text or "",
        self_review_text=self_review_text or "",
        manager_comments=manager_comments or "",
    )
    extracted = ExtractedData(
        itp_employee_scores=self_scores,
        itp_manager_scores=manager_scores,
        self_review_text=self_review_text,
        feedback_360_chars=len(feedback_text or ""),
        extraction_status=status,
    )
    return synthesize_review(inputs, extracted_data=extracted)
