import re
from rapidfuzz.distance import Levenshtein
from vehicle_sync.errors import InvalidInputError

_NEW_MARKERS = re.compile(r"\b(nya|new|2024|2025)\b")
_POWERTRAIN_WORDS = re.compile(r"\b(elektrisk|electric|hybrid|plug-in)\b")
_WHITESPACE = re.compile(r"\s+")


def _require_str(value, label: str) -> str:
    if not isinstance(value, str):
        raise InvalidInputError(f"{label} must be a string, got {type(value).__name__}")
    return value


def similarity(a: str, b: str) -> float:
    """
    Edit-distance similarity between two strings.

    Score is (len(longer) - levenshtein(longer, shorter)) / len(longer), using
    unit cost insertions, deletions and substitutions (no transpositions).
    Callers normalize case and whitespace beforehand.

    Args:
        a (str): First string.
        b (str): Second string.

    Returns:
        float: Similarity in [0, 1]; two empty strings score 1.0.
    """
    _require_str(a, "a")
    _require_str(b, "b")
    longer, shorter = (a, b) if len(a) >= len(b) else (b, a)
    if not longer:
        return 1.0
    distance = Levenshtein.distance(longer, shorter)
    return (len(longer) - distance) / len(longer)


def normalize_title(text: str) -> str:
    """Trim and lowercase a title for exact/fuzzy comparison."""
    return _require_str(text, "title").strip().lower()


def normalize_vehicle_name(text: str) -> str:
    """
    Normalize a vehicle or model name for structured comparison.

    Drops model-year/"new" markers and powertrain words so that
    "Nya Kona Electric 2025" and "Kona" compare as the same vehicle.
    """
    name = _require_str(text, "name").lower()
    name = _NEW_MARKERS.sub("", name)
    name = _POWERTRAIN_WORDS.sub("", name)
    return _WHITESPACE.sub(" ", name).strip()


def price_proximity(a: float, b: float) -> float:
    """Relative closeness of two prices: 1.0 when equal, 0.0 when one is zero or they diverge fully."""
    high = max(abs(a), abs(b))
    if high == 0:
        return 1.0
    return max(0.0, 1.0 - abs(a - b) / high)
