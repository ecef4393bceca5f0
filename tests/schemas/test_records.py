from __future__ import annotations

import pytest
from pydantic import ValidationError as PydanticValidationError

from recruitpipeline.errors import ValidationError
from recruitpipeline.schemas import (
    Application,
    ApplicationStatus,
    Decision,
    InterviewEvaluation,
    Phase,
    Round,
    ScorePatch,
)


def test_application_defaults():
    app = Application(application_id="A-1", candidate_id="C-1")

    assert app.current_round is Round.RESUME
    assert app.status is ApplicationStatus.SUBMITTED
    assert app.is_terminal is False


def test_application_requires_candidate():
    with pytest.raises(PydanticValidationError):
        Application(application_id="A-1")  # type: ignore[call-arg]


def test_round_and_phase_are_linked():
    assert Round.COFFEE_CHAT.phase is Phase.COFFEE
    assert Phase.FINAL_ROUND.round is Round.FINAL_ROUND
    assert Round.FIRST_ROUND.next() is Round.FINAL_ROUND
    assert Round.FINAL_ROUND.next() is None
    assert Round.RESUME.label == "Resume Review"


def test_phase_parse_accepts_round_and_rejects_unknown():
    assert Phase.parse(Round.FIRST_ROUND) is Phase.FIRST_ROUND
    assert Phase.parse(" Coffee ") is Phase.COFFEE
    with pytest.raises(ValidationError):
        Phase.parse("interview")


def test_decision_domain_is_closed():
    assert [d.value for d in Decision] == ["yes", "maybe_yes", "maybe_no", "no", ""]
    assert Decision.parse(None) is Decision.PENDING
    assert Decision.YES.is_resolved and Decision.NO.is_resolved
    assert not Decision.MAYBE_YES.is_resolved
    assert not Decision.PENDING.is_resolved
    with pytest.raises(ValidationError):
        Decision.parse("unsure")


def test_terminal_statuses():
    terminal = {status for status in ApplicationStatus if status.is_terminal}

    assert terminal == {
        ApplicationStatus.ACCEPTED,
        ApplicationStatus.REJECTED,
        ApplicationStatus.WAITLISTED,
    }


def test_interview_evaluation_derives_totals_and_decision():
    evaluation = InterviewEvaluation(
        evaluation_id="E-1",
        interview_id="I-1",
        application_id="A-1",
        decision="maybe_yes",
        behavioral_leadership=4,
        behavioral_problem_solving=3,
        behavioral_interest=5,
    )

    assert evaluation.behavioral_total == 12.0
    assert evaluation.market_sizing_total is None
    assert evaluation.recognized_decision is not None
    assert evaluation.recognized_decision.value == "MAYBE_YES"


def test_interview_evaluation_rejects_out_of_range_subscore():
    with pytest.raises(PydanticValidationError):
        InterviewEvaluation(
            evaluation_id="E-1",
            interview_id="I-1",
            application_id="A-1",
            market_sizing_logic=6,
        )


def test_score_patch_tracks_only_sent_fields():
    patch = ScorePatch(admin_score=7.5, admin_notes="calibrated")

    assert patch.changes() == {"admin_score": 7.5, "admin_notes": "calibrated"}
    with pytest.raises(PydanticValidationError):
        ScorePatch(admin_score=11)
