import pytest

from vehicle_sync.models import CandidateRecord, ExistingRecord, MatchReason, VehicleModel
from vehicle_sync.matchers.structured_matcher import (
    model_overlap,
    model_tokens_for,
    score_vehicle_match,
    structured_match,
    token_overlap,
)


def _models(*pairs):
    return [VehicleModel(name=name, price=price) for name, price in pairs]


def test_full_signal_match_scores_one():
    candidate = CandidateRecord(
        title="Kona Electric 2025",
        brand="Hyundai",
        body_type="SUV",
        vehicle_models=_models(("Advanced 65 kWh", 449900), ("Essential 48 kWh", 399900)),
    )
    existing = ExistingRecord(
        id="1",
        title="Kona",
        brand="hyundai ",
        body_type="suv",
        vehicle_models=_models(("Advanced 65 kWh", 459900), ("Essential 48 kWh", 389900)),
    )

    score = score_vehicle_match(candidate, existing)

    assert score.total == pytest.approx(1.0)
    assert score.title_score == 1.0
    assert score.reasons == ["Title match: 100%", "Same brand", "Model overlap: 100%", "Same body type"]


def test_missing_title_scores_zero():
    score = score_vehicle_match(CandidateRecord(title="Kona"), ExistingRecord(id="1", title=None))

    assert score.total == 0.0
    assert score.reasons == ["Missing title data"]


def test_missing_fields_contribute_nothing():
    candidate = CandidateRecord(title="Kona Advanced", brand="Hyundai")
    existing = ExistingRecord(id="1", title="Kona Advanced")

    score = score_vehicle_match(candidate, existing)

    # title (0.4) + token overlap (0.25), no brand or body type on the existing side
    assert score.total == pytest.approx(0.65)
    assert "Same brand" not in score.reasons


def test_model_overlap_requires_close_prices():
    new = _models(("Select 2WD", 399900), ("Inclusive AWD", 459900))
    close = _models(("Select 2WD", 409900), ("Inclusive AWD", 449900))
    far = _models(("Select 2WD", 409900), ("Inclusive AWD", 150000))

    assert model_overlap(new, close) == 1.0
    assert model_overlap(new, far) == 0.5


def test_model_overlap_unknown_price_is_compatible():
    new = _models(("Select 2WD", None))
    existing = _models(("Select 2WD", 409900), ("Inclusive AWD", 449900))

    assert model_overlap(new, existing) == 0.5


def test_model_overlap_empty_side():
    assert model_overlap([], _models(("Select", 1))) == 0.0


def test_model_tokens_prefer_extracted_tokens():
    record = CandidateRecord(title="Kona Electric Advanced", model_tokens=["Kona", "N Line"])

    assert model_tokens_for(record) == {"kona", "n line"}
    assert model_tokens_for(CandidateRecord(title="Kona Electric Advanced")) == {"kona", "advanced"}


def test_token_overlap_is_jaccard():
    assert token_overlap({"a", "b"}, {"b", "c"}) == pytest.approx(1 / 3)
    assert token_overlap(set(), {"a"}) == 0.0


def test_structured_match_picks_best_of_all():
    candidate = CandidateRecord(title="Kona Advanced", brand="Hyundai", body_type="SUV")
    existing = [
        ExistingRecord(id="weaker", title="Kona Advance", brand="Hyundai", body_type="SUV"),
        ExistingRecord(id="best", title="Kona Advanced", brand="Hyundai", body_type="SUV"),
        ExistingRecord(id="untitled", title=None, brand="Hyundai"),
    ]

    result = structured_match(candidate, existing)

    assert result.found is True
    assert result.record.id == "best"
    assert result.match_reason == MatchReason.STRUCTURED
    assert result.match_score == pytest.approx(1.0)


def test_structured_match_below_candidate_threshold():
    candidate = CandidateRecord(title="Kona Advanced")
    existing = [ExistingRecord(id="1", title="Kona Advanced")]

    result = structured_match(candidate, existing)

    assert result.found is False
    assert result.match_reason == MatchReason.NO_MATCH
    assert result.match_score == 0.0


def test_bare_string_model_tokens_are_one_token():
    candidate = CandidateRecord.from_dict({"title": "Kona Advanced", "model_tokens": "N Line"})

    assert candidate.model_tokens == ["N Line"]
    assert model_tokens_for(candidate) == {"n line"}
    assert model_tokens_for(CandidateRecord(title="Kona", model_tokens="N Line")) == {"n line"}
