import pytest

from vehicle_sync.models import CandidateRecord, ExistingRecord, MatchReason
from vehicle_sync.matchers.title_matcher import (
    find_exact_title_match,
    find_similar_title_match,
    match_campaign,
)


def test_find_exact_title_match_normalizes_existing_titles():
    existing = [ExistingRecord(id="1", title="Other"), ExistingRecord(id="2", title="  KONA N Line ")]

    assert find_exact_title_match("kona n line", existing).id == "2"
    assert find_exact_title_match("kona", existing) is None


def test_find_similar_title_match_returns_score():
    existing = [ExistingRecord(id="1", title="Mokka GS Electrik")]

    record, score = find_similar_title_match("mokka gs electric", existing)

    assert record.id == "1"
    assert score == pytest.approx(16 / 17)


def test_find_similar_title_match_custom_threshold():
    existing = [ExistingRecord(id="1", title="Mokka GS Electrik")]

    assert find_similar_title_match("mokka gs electric", existing, threshold=0.95) is None


def test_campaign_match_picks_best_title():
    existing = [
        ExistingRecord(id="1", title="Sommarkampanj Kona 2025"),
        ExistingRecord(id="2", title="Sommarkampanj Kona"),
        ExistingRecord(id="3", title=None),
    ]

    result = match_campaign(CandidateRecord(title="Sommarkampanj Kona!"), existing)

    assert result.found is True
    assert result.record.id == "2"
    assert result.match_reason == MatchReason.TITLE_SIMILARITY
    assert result.details == [f"Title similarity: {result.match_score * 100:.0f}%"]


def test_campaign_without_title_is_not_found():
    result = match_campaign(CandidateRecord(title=""), [ExistingRecord(id="1", title="")])

    assert result.found is False
    assert result.match_score == 0.0
