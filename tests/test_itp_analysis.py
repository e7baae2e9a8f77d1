import pytest

from app.schemas.synthesis import ITPScores
from app.services.itp_analysis import analyze_itp_scores, trait_comparison


def test_gap_analysis_flags_each_trait_independently():
    self_scores = ITPScores(humble=5, hungry=5, smart=5)
    manager_scores = ITPScores(humble=8, hungry=5, smart=3)

    analysis = analyze_itp_scores(self_scores, manager_scores)

    assert analysis.complete
    assert len(analysis.gaps) == 2
    humble, smart = analysis.gaps
    assert "Manager rates humble higher" in humble and "blind spot" in humble
    assert "Self-assessment in smart is higher" in smart and "overconfidence" in smart
    assert analysis.alignment == [
        "Hungry: good alignment between self and manager assessment (5 vs 5)"
    ]


@pytest.mark.parametrize("self_score,manager_score,wording", [
    (5, 6, "good alignment"),
    (6, 5, "good alignment"),
    (5, 7, "blind spot"),
    (7, 5, "overconfidence"),
    (1, 10, "blind spot"),
])
def test_gap_threshold(self_score, manager_score, wording):
    assert wording in trait_comparison("hungry", self_score, manager_score)


def test_averages_classify_strengths_and_development():
    analysis = analyze_itp_scores(
        ITPScores(humble=9, hungry=6, smart=7),
        ITPScores(humble=8, hungry=5, smart=8),
    )

    assert analysis.averages == {"humble": 8.5, "hungry": 5.5, "smart": 7.5}
    assert analysis.strengths == ["Strong humble (avg 8.5)"]
    assert analysis.development_areas == ["Development opportunity in hungry (avg 5.5)"]


@pytest.mark.parametrize("self_scores,manager_scores", [
    (None, None),
    (ITPScores(humble=5, hungry=5, smart=5), None),
    (None, ITPScores(humble=5, hungry=5, smart=5)),
])
def test_missing_side_is_incomplete(self_scores, manager_scores):
    analysis = analyze_itp_scores(self_scores, manager_scores)

    assert not analysis.complete
    assert analysis.gaps == []
    assert analysis.summary() == "ITP assessment data incomplete"


def test_scores_outside_range_are_rejected():
    with pytest.raises(ValueError):
        ITPScores(humble=0, hungry=5, smart=5)
    with pytest.raises(ValueError):
        ITPScores(humble=5, hungry=11, smart=5)
