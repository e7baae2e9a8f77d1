from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, Literal

# --- SHARED ---

class ITPScores(BaseModel):
    """Ideal Team Player triple; each trait is rated 1-10."""
    humble: int = Field(ge=1, le=10)
    hungry: int = Field(ge=1, le=10)
    smart: int = Field(ge=1, le=10)

# --- INPUT BUNDLE ---

class ReviewInputs(BaseModel):
    """Everything the synthesis pipeline knows about one employee. Any subset may be absent."""
    model_config = ConfigDict(populate_by_name=True)

    itp_self_scores: Optional[ITPScores] = Field(default=None, alias="itpSelfScores")
    itp_manager_scores: Optional[ITPScores] = Field(default=None, alias="itpManagerScores")
    feedback_360_text: str = Field(default="", alias="feedback360Text")
    self_review_text: str = Field(default="", alias="selfReview")
    manager_comments: str = Field(default="", alias="managerComments")

# --- OUTPUT ---

class DataUsed(BaseModel):
    """Presence map: which of the four input categories were supplied."""
    model_config = ConfigDict(populate_by_name=True)

    itp_scores: bool = Field(default=False, alias="itpScores")
    feedback_360: bool = Field(default=False, alias="feedback360")
    self_review: bool = Field(default=False, alias="selfReview")
    manager_comments: bool = Field(default=False, alias="managerComments")

    def any(self) -> bool:
        return self.itp_scores or self.feedback_360 or self.self_review or self.manager_comments

    def source_names(self) -> list:
        names = []
        if self.itp_scores:
            names.append("ITP Assessment Scores")
        if self.feedback_360:
            names.append("360 Feedback")
        if self.self_review:
            names.append("Employee Self Review")
        if self.manager_comments:
            names.append("Manager Comments")
        return names

class SynthesisSections(BaseModel):
    strengths: str
    development: str
    goals: str
    overall: str

ExtractionState = Literal["complete", "failed", "skipped"]

class ExtractionStatus(BaseModel):
    """Per upload category: skipped when nothing was uploaded, failed when nothing usable came back."""
    model_config = ConfigDict(populate_by_name=True)

    itp_employee: ExtractionState = Field(default="skipped", alias="itpEmployee")
    itp_manager: ExtractionState = Field(default="skipped", alias="itpManager")
    feedback_360: ExtractionState = Field(default="skipped", alias="feedback360")
    self_review: ExtractionState = Field(default="skipped", alias="selfReview")

class ExtractedData(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    itp_employee_scores: Optional[ITPScores] = Field(default=None, alias="itpEmployeeScores")
    itp_manager_scores: Optional[ITPScores] = Field(default=None, alias="itpManagerScores")
    self_review_text: Optional[str] = Field(default=None, alias="selfReviewText")
    feedback_360_chars: int = Field(default=0, alias="feedback360Chars")
    extraction_status: ExtractionStatus = Field(default_factory=ExtractionStatus, alias="extractionStatus")

class SynthesisResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    strengths: str
    development_feedback: str = Field(alias="developmentFeedback")
    goals_next_year: str = Field(alias="goalsNextYear")
    overall_assessment: str = Field(alias="overallAssessment")
    data_used: DataUsed = Field(alias="dataUsed")
    extracted_data: Optional[ExtractedData] = Field(default=None, alias="extractedData")
    source: Literal["ai", "fallback"] = "fallback"
    model: Optional[str] = None

    @classmethod
    def from_sections(cls, sections: SynthesisSections, data_used: DataUsed, **kwargs) -> "SynthesisResult":
        return cls(
            strengths=sections.strengths,
            development_feedback=sections.development,
            goals_next_year=sections.goals,
            overall_assessment=sections.overall,
            data_used=data_used,
            **kwargs,
        )
