import pytest

from vehicle_sync.errors import InvalidInputError
from vehicle_sync.matchers.similarity import (
    normalize_title,
    normalize_vehicle_name,
    price_proximity,
    similarity,
)

PAIRS = [
    ("", ""),
    ("", "abc"),
    ("kitten", "sitting"),
    ("mokka gs electric", "mokka gs electrik"),
    ("evitara select 2wd", "evitara select"),
    ("ab", "ba"),
]


@pytest.mark.parametrize("text", ["", "a", "eVitara Select 2WD", "  spaced  "])
def test_similarity_identity(text):
    assert similarity(text, text) == 1.0


@pytest.mark.parametrize("a,b", PAIRS)
def test_similarity_symmetric_and_bounded(a, b):
    score = similarity(a, b)
    assert score == similarity(b, a)
    assert 0.0 <= score <= 1.0


def test_similarity_uses_levenshtein_over_longer_length():
    # kitten -> sitting: 3 edits over length 7
    assert similarity("kitten", "sitting") == pytest.approx(4 / 7)
    assert similarity("mokka gs electric", "mokka gs electrik") == pytest.approx(16 / 17)


def test_similarity_has_no_transposition():
    assert similarity("ab", "ba") == 0.0


def test_similarity_one_empty_string():
    assert similarity("", "abc") == 0.0


@pytest.mark.parametrize("a,b", [(None, "x"), ("x", 3), (["x"], "x")])
def test_similarity_rejects_non_strings(a, b):
    with pytest.raises(InvalidInputError):
        similarity(a, b)


def test_normalize_title():
    assert normalize_title("  eVitara Select 2WD \n") == "evitara select 2wd"


def test_normalize_vehicle_name_drops_markers_and_powertrain():
    assert normalize_vehicle_name("Nya Kona Electric 2025") == "kona"
    assert normalize_vehicle_name("Kuga  Plug-in Hybrid ST-Line") == "kuga st-line"


def test_price_proximity():
    assert price_proximity(100.0, 100.0) == 1.0
    assert price_proximity(100.0, 80.0) == pytest.approx(0.8)
    assert price_proximity(0.0, 0.0) == 1.0
    assert price_proximity(0.0, 50.0) == 0.0
