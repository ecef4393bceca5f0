from __future__ import annotations

import pytest

from recruitpipeline.core import ScoreAggregator
from recruitpipeline.schemas import DocumentScore, DocumentType


def build_score(**kwargs) -> DocumentScore:
    defaults = {"score_id": "S-1", "candidate_id": "C-1"}
    defaults.update(kwargs)
    return DocumentScore(**defaults)


def test_average_of_empty_list_is_zero():
    assert ScoreAggregator().average([]) == 0.0


def test_admin_score_overrides_overall():
    aggregator = ScoreAggregator()
    score = build_score(overall_score=4.0, admin_score=9.5)

    assert aggregator.effective_score(score) == pytest.approx(9.5)
    assert score.effective_score == pytest.approx(9.5)


def test_admin_score_of_zero_still_wins():
    aggregator = ScoreAggregator()

    assert aggregator.effective_score(build_score(overall_score=8.0, admin_score=0.0)) == 0.0


def test_effective_score_is_zero_when_nothing_parses():
    aggregator = ScoreAggregator()

    assert aggregator.effective_score({"overall_score": "n/a"}) == 0.0
    assert aggregator.effective_score({}) == 0.0


def test_average_skips_non_numeric_scores():
    aggregator = ScoreAggregator()
    scores = [
        {"overall_score": 6},
        {"overallScore": "8"},
        {"overall_score": "pending"},
        {"overall_score": None},
        {"overall_score": float("nan")},
    ]

    assert aggregator.average(scores) == pytest.approx(7.0)


def test_average_never_blends_override_with_original():
    aggregator = ScoreAggregator()
    scores = [
        build_score(score_id="S-1", overall_score=2.0, admin_score=10.0),
        build_score(score_id="S-2", overall_score=6.0),
    ]

    assert aggregator.average(scores) == pytest.approx(8.0)


def test_average_of_only_invalid_scores_is_zero():
    aggregator = ScoreAggregator()

    assert aggregator.average([{"overall_score": "x"}, {"admin_score": None}]) == 0.0


def test_overall_from_subscores_uses_present_values():
    assert ScoreAggregator.overall_from_subscores(6, None, 9) == pytest.approx(7.5)
    assert ScoreAggregator.overall_from_subscores(None, None, None) == 0.0


def test_averages_by_type_reports_every_document_type():
    aggregator = ScoreAggregator()
    scores = [
        build_score(score_id="R-1", document_type=DocumentType.RESUME, overall_score=8.0),
        build_score(score_id="R-2", document_type=DocumentType.RESUME, overall_score=6.0),
        build_score(score_id="V-1", document_type=DocumentType.VIDEO, overall_score=1.5),
    ]

    averages = aggregator.averages_by_type(scores)

    assert averages[DocumentType.RESUME] == pytest.approx(7.0)
    assert averages[DocumentType.VIDEO] == pytest.approx(1.5)
    assert averages[DocumentType.COVER_LETTER] == 0.0
