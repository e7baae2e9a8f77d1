"""
Deterministic review text built only from local data.

Used whenever the completion service is unavailable, disabled, skipped or
returns something the section splitter cannot use. The output depends only on
the presence map and the raw inputs, so repeated calls with the same inputs
return the same text.
"""
from typing import List

from app.schemas.synthesis import DataUsed, ReviewInputs, SynthesisSections
from app.services.itp_analysis import ITPAnalysis, analyze_itp_scores

STRENGTH_THEMES = [
    "strategic", "technical", "innovative", "collaborative",
    "leadership", "problem-solving", "communication",
]

NO_DATA_NOTE = (
    "No review inputs were provided. Add assessment scores, multi-rater feedback, "
    "a self review or manager comments and generate the review again."
)


def _bullets(items: List[str]) -> str:
    return "\n".join(f"• {item}" for item in items)


def _input_corpus(inputs: ReviewInputs) -> str:
    return " ".join(
        [inputs.feedback_360_text, inputs.self_review_text, inputs.manager_comments]
    ).lower()


def _strengths(data_used: DataUsed, inputs: ReviewInputs, itp: ITPAnalysis) -> str:
    if not data_used.any():
        return f"Specific strengths could not be identified. {NO_DATA_NOTE}"

    corpus = _input_corpus(inputs)
    items = [f"Strong {theme} capabilities" for theme in STRENGTH_THEMES if theme in corpus][:3]
    items.extend(itp.strengths)
    if not items:
        items.append("Consistent contribution across the areas covered by the available inputs")

    parts = ["Based on the available inputs, key strengths include:", _bullets(items)]
    if data_used.manager_comments:
        parts.append(f"Manager observations:\n{inputs.manager_comments.strip()}")
    return "\n\n".join(parts)


def _development(data_used: DataUsed, inputs: ReviewInputs, itp: ITPAnalysis) -> str:
    if not data_used.any():
        return f"Development priorities could not be identified. {NO_DATA_NOTE}"

    corpus = _input_corpus(inputs)
    items = []
    if "communication" in corpus:
        items.append("Enhanced communication consistency and responsiveness")
    if "follow-through" in corpus or "execution" in corpus:
        items.append("Improved project follow-through and execution discipline")
    items.extend(itp.development_areas)
    if not items:
        items.append("Agree on one or two focus areas with the manager at the start of the next cycle")

    parts = ["Development priorities:", _bullets(items)]
    if itp.gaps:
        parts.append("ITP assessment insights:\n" + _bullets(itp.gaps))
    elif data_used.itp_scores and not itp.complete:
        parts.append("Only one side of the ITP assessment was available, so no gap analysis was made.")
    return "\n\n".join(parts)


def _goals(data_used: DataUsed, itp: ITPAnalysis) -> str:
    goals = []
    for area in itp.development_areas:
        trait = area.rsplit(" in ", 1)[-1].split(" (", 1)[0]
        goals.append(f"Build on the {trait} trait with a concrete, observable behaviour change")
    goals.extend([
        "Communication: establish consistent status updates for stakeholders",
        "Execution: carry projects through from concept to completion",
        "Growth: agree a development plan with the manager and review it each quarter",
    ])
    intro = (
        "Goals for the next review period:" if data_used.any()
        else "General goals until review inputs are available:"
    )
    return f"{intro}\n\n{_bullets(goals)}"


def _overall(data_used: DataUsed, itp: ITPAnalysis) -> str:
    sources = data_used.source_names()
    if not sources:
        return (
            "An overall assessment cannot be made without review inputs. "
            "This text was generated automatically and should be replaced by the manager."
        )
    parts = [
        f"This assessment draws on: {', '.join(sources)}.",
        "It was generated from the raw inputs without the AI synthesis service "
        "and should be reviewed and edited by the manager before it is finalized.",
    ]
    if itp.strengths:
        parts.append(f"The ITP assessment points to {', '.join(itp.strengths)}.")
    return " ".join(parts)


def build_fallback(data_used: DataUsed, inputs: ReviewInputs) -> SynthesisSections:
    itp = analyze_itp_scores(inputs.itp_self_scores, inputs.itp_manager_scores)
    return SynthesisSections(
        strengths=_strengths(data_used, inputs, itp),
        development=_development(data_used, inputs, itp),
        goals=_goals(data_used, itp),
        overall=_overall(data_used, itp),
    )
