from __future__ import annotations

import pytest

from recruitpipeline.core import RankingConfig, RankingEngine, RankingRow
from recruitpipeline.schemas import (
    Application,
    Decision,
    DocumentScore,
    DocumentType,
    InterviewEvaluation,
    InterviewType,
    Phase,
)


def row(application_id: str, score: float, name: str | None = None) -> RankingRow:
    return RankingRow(
        application_id=application_id,
        candidate_id=f"C-{application_id}",
        name=name,
        email=None,
        score=score,
        display=str(score),
    )


def test_decision_ranking_score_averages_weights():
    engine = RankingEngine()

    assert engine.decision_ranking_score([{"decision": "YES"}, {"decision": "NO"}]) == pytest.approx(2.0)
    assert engine.decision_ranking_score([]) == 0.0


def test_decision_ranking_score_ignores_unrecognized_decisions():
    engine = RankingEngine()
    evaluations = [
        {"decision": "MAYBE_YES"},
        {"decision": None},
        {"decision": "STRONG_YES"},
        {"decision": "unsure"},
    ]

    assert engine.decision_ranking_score(evaluations) == pytest.approx(2.5)


def test_first_round_score_uses_structured_totals():
    engine = RankingEngine()

    score = engine.first_round_ranking_score([{"behavioralTotal": 12, "marketSizingTotal": 9}])

    assert score == pytest.approx(7.0)


def test_first_round_score_falls_back_to_decisions():
    engine = RankingEngine()
    evaluations = [
        {"decision": "YES", "behavioral_total": 12},
        {"decision": "MAYBE_NO"},
    ]

    assert engine.first_round_ranking_score(evaluations) == pytest.approx(2.5)


def test_first_round_score_derives_totals_from_subscores():
    engine = RankingEngine()
    evaluation = InterviewEvaluation(
        evaluation_id="E-1",
        interview_id="I-1",
        interview_type=InterviewType.ROUND_ONE,
        application_id="A-1",
        behavioral_leadership=5,
        behavioral_problem_solving=5,
        behavioral_interest=5,
        market_sizing_teamwork=5,
        market_sizing_logic=5,
        market_sizing_creativity=5,
    )

    assert engine.first_round_ranking_score([evaluation]) == pytest.approx(10.0)


def test_composite_total_is_a_capped_sum_not_a_percentage():
    engine = RankingEngine()

    assert engine.composite_total(8.0, 1.5, 2.0, 3) == pytest.approx(14.5)
    assert engine.composite_total(20.0, 5.0, 9.0, 4) == pytest.approx(13 + 2 + 3 + 4)


def test_composite_total_respects_configured_caps():
    engine = RankingEngine(config=RankingConfig(resume_max=10.0))

    assert engine.composite_total(12.0, 0.0, 0.0, 0.0) == pytest.approx(10.0)


def test_rank_is_descending_and_stable_for_ties():
    rows = [row("A", 5.0), row("B", 7.0), row("C", 5.0), row("D", 7.0)]

    ranked = RankingEngine.rank(rows)

    assert [r.application_id for r in ranked] == ["B", "D", "A", "C"]


def test_staging_rows_for_resume_phase_use_composite_total():
    engine = RankingEngine()
    applications = [
        Application(application_id="A-1", candidate_id="C-1", name="Ada"),
        Application(application_id="A-2", candidate_id="C-2", name="Grace"),
    ]
    scores = {
        "A-1": [
            DocumentScore(score_id="S-1", candidate_id="C-1", overall_score=6.0),
            DocumentScore(
                score_id="S-2",
                candidate_id="C-1",
                document_type=DocumentType.VIDEO,
                overall_score=1.0,
            ),
        ],
        "A-2": [DocumentScore(score_id="S-3", candidate_id="C-2", overall_score=9.0)],
    }

    rows = engine.staging_rows(
        applications,
        Phase.RESUME,
        document_scores=scores,
        event_points={"A-1": 1.0},
        decisions={"A-2": Decision.YES},
    )

    assert [r.application_id for r in rows] == ["A-2", "A-1"]
    assert rows[0].score == pytest.approx(9.0)
    assert rows[0].decision is Decision.YES
    assert rows[1].score == pytest.approx(8.0)
    assert rows[1].display == "8.0/18"
    assert rows[1].components["events"] == 1.0


def test_filter_rows_matches_names_with_typos():
    engine = RankingEngine()
    rows = [row("A", 1.0, name="Katherine Johnson"), row("B", 2.0, name="Alan Turing")]

    assert [r.application_id for r in engine.filter_rows(rows, "katherine")] == ["A"]
    assert [r.application_id for r in engine.filter_rows(rows, "Katherin Jonson")] == ["A"]
    assert len(engine.filter_rows(rows, "  ")) == 2
