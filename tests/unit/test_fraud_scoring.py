from __future__ import annotations

from dataclasses import replace

import pytest

from services.fraud_service import (
    FraudContext,
    FraudPolicy,
    HeuristicResult,
    is_unspecified_origin,
    score_submission,
)
from services.validation_service import ValidatedSubmission

BASE_SUBMISSION = ValidatedSubmission(
    skill_id=1,
    skill_name="React",
    location_id=1,
    location_name="Remote",
    hourly_rate=55.0,
    seniority_level="mid",
    project_type="hourly",
    years_experience=5,
    user_id=None,
)

ESTABLISHED_RATES = [50.0 + step for step in range(10)]


def test_clean_submission_scores_zero() -> None:
    assessment = score_submission(BASE_SUBMISSION, FraudContext(origin="203.0.113.7", recent_origin_count=0))

    assert assessment.score == 0.0
    assert assessment.reasons == ()
    assert not assessment.should_auto_reject(FraudPolicy())


def test_fourth_submission_in_window_trips_rate_limit() -> None:
    third = score_submission(BASE_SUBMISSION, FraudContext(origin="203.0.113.7", recent_origin_count=2))
    fourth = score_submission(BASE_SUBMISSION, FraudContext(origin="203.0.113.7", recent_origin_count=3))

    assert third.score == 0.0
    assert fourth.score == pytest.approx(0.5)
    assert fourth.reasons == ("rate_limit",)
    assert not fourth.should_auto_reject(FraudPolicy())


@pytest.mark.parametrize("origin", ["0.0.0.0", "::"])
def test_unspecified_origin_is_blocked(origin: str) -> None:
    assessment = score_submission(BASE_SUBMISSION, FraudContext(origin=origin))

    assert assessment.score == 1.0
    assert "blocked_origin" in assessment.reasons
    assert assessment.should_auto_reject(FraudPolicy())


@pytest.mark.parametrize("origin", [None, "", "testclient", "198.51.100.4", "2001:db8::1"])
def test_specified_or_unparseable_origins_are_not_blocked(origin: str | None) -> None:
    assert not is_unspecified_origin(origin)


def test_rate_outside_p5_p95_is_flagged_once_enough_samples() -> None:
    outlier = replace(BASE_SUBMISSION, hourly_rate=300.0)

    assessment = score_submission(outlier, FraudContext(skill_rates=ESTABLISHED_RATES))

    assert assessment.reasons == ("statistical_outlier",)
    assert assessment.score == pytest.approx(0.3)


def test_outlier_check_waits_for_minimum_sample() -> None:
    outlier = replace(BASE_SUBMISSION, hourly_rate=300.0)

    assessment = score_submission(outlier, FraudContext(skill_rates=ESTABLISHED_RATES[:9]))

    assert assessment.score == 0.0


def test_rate_inside_band_is_not_an_outlier() -> None:
    assessment = score_submission(BASE_SUBMISSION, FraudContext(skill_rates=ESTABLISHED_RATES))

    assert "statistical_outlier" not in assessment.reasons


@pytest.mark.parametrize(
    ("seniority", "years"),
    [("expert", 1), ("senior", 0), ("junior", 20)],
)
def test_contradictory_seniority_and_experience(seniority: str, years: int) -> None:
    submission = replace(BASE_SUBMISSION, seniority_level=seniority, years_experience=years)

    assessment = score_submission(submission, FraudContext())

    assert assessment.reasons == ("contradictory_fields",)
    assert assessment.score == pytest.approx(0.15)


@pytest.mark.parametrize(
    ("seniority", "years"),
    [("expert", 2), ("senior", 1), ("junior", 15), ("mid", 0)],
)
def test_consistent_seniority_and_experience(seniority: str, years: int) -> None:
    submission = replace(BASE_SUBMISSION, seniority_level=seniority, years_experience=years)

    assert score_submission(submission, FraudContext()).score == 0.0


def test_missing_experience_is_a_light_signal() -> None:
    submission = replace(BASE_SUBMISSION, years_experience=None)

    assessment = score_submission(submission, FraudContext())

    assert assessment.reasons == ("missing_experience",)
    assert assessment.score == pytest.approx(0.05)


def test_contributions_add_up_in_heuristic_order() -> None:
    submission = replace(BASE_SUBMISSION, hourly_rate=300.0, seniority_level="expert", years_experience=0)
    context = FraudContext(origin="203.0.113.7", recent_origin_count=5, skill_rates=ESTABLISHED_RATES)

    assessment = score_submission(submission, context)

    assert assessment.reasons == ("rate_limit", "statistical_outlier", "contradictory_fields")
    assert assessment.score == pytest.approx(0.95)
    assert [check.weight for check in assessment.checks] == [0.5, 0.3, 0.15]


def test_score_is_clamped_to_one() -> None:
    def heavy(validated, context, policy):
        return HeuristicResult("heavy", 0.7, "always fires")

    assessment = score_submission(BASE_SUBMISSION, FraudContext(), heuristics=(heavy, heavy))

    assert assessment.score == 1.0
    assert assessment.reasons == ("heavy", "heavy")


def test_auto_reject_can_be_disabled() -> None:
    policy = FraudPolicy(auto_reject_threshold=None)

    assessment = score_submission(BASE_SUBMISSION, FraudContext(origin="0.0.0.0"), policy)

    assert assessment.score == 1.0
    assert not assessment.should_auto_reject(policy)


def test_policy_threshold_is_configurable() -> None:
    policy = FraudPolicy(max_submissions_per_window=1)

    assessment = score_submission(BASE_SUBMISSION, FraudContext(origin="203.0.113.7", recent_origin_count=1), policy)

    assert assessment.reasons == ("rate_limit",)
