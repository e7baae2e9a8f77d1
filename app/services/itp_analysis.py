"""
Ideal Team Player gap analysis.

Compares the employee's self assessment with the manager's assessment,
trait by trait. A gap of two points or more in either direction is flagged;
averages at or above 8 count as strengths and at or below 6 as development
areas.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from app.models.review import ITP_TRAITS
from app.schemas.synthesis import ITPScores

GAP_THRESHOLD = 2
STRENGTH_AVERAGE = 8
DEVELOPMENT_AVERAGE = 6


@dataclass
class ITPAnalysis:
    complete: bool
    gaps: List[str] = field(default_factory=list)
    alignment: List[str] = field(default_factory=list)
    strengths: List[str] = field(default_factory=list)
    development_areas: List[str] = field(default_factory=list)
    averages: Dict[str, float] = field(default_factory=dict)

    def summary(self) -> str:
        if not self.complete:
            return "ITP assessment data incomplete"
        lines = self.gaps + self.alignment + self.strengths + self.development_areas
        return "\n".join(f"- {line}" for line in lines)


def trait_comparison(trait: str, self_score: int, manager_score: int) -> str:
    gap = manager_score - self_score
    if abs(gap) >= GAP_THRESHOLD:
        if gap > 0:
            return (
                f"Manager rates {trait} higher than self-assessment "
                f"({manager_score} vs {self_score}) - potential blind spot in self-awareness"
            )
        return (
            f"Self-assessment in {trait} is higher than manager perspective "
            f"({self_score} vs {manager_score}) - may indicate overconfidence"
        )
    return (
        f"{trait.capitalize()}: good alignment between self and manager assessment "
        f"({self_score} vs {manager_score})"
    )


def analyze_itp_scores(
    self_scores: Optional[ITPScores], manager_scores: Optional[ITPScores]
) -> ITPAnalysis:
    if self_scores is None or manager_scores is None:
        return ITPAnalysis(complete=False)

    analysis = ITPAnalysis(complete=True)
    for trait in ITP_TRAITS:
        s = getattr(self_scores, trait)
        m = getattr(manager_scores, trait)
        line = trait_comparison(trait, s, m)
        if abs(m - s) >= GAP_THRESHOLD:
            analysis.gaps.append(line)
        else:
            analysis.alignment.append(line)

        avg = (s + m) / 2
        analysis.averages[trait] = avg
        if avg >= STRENGTH_AVERAGE:
            analysis.strengths.append(f"Strong {trait} (avg {avg:.1f})")
        elif avg <= DEVELOPMENT_AVERAGE:
            analysis.development_areas.append(f"Development opportunity in {trait} (avg {avg:.1f})")
    return analysis
