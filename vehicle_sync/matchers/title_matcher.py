from typing import Optional, Sequence, Tuple
from loguru import logger

from vehicle_sync.config import CAMPAIGN_THRESHOLD, FUZZY_TITLE_THRESHOLD
from vehicle_sync.models import CandidateRecord, ExistingRecord, MatchReason, MatchResult
from vehicle_sync.matchers.similarity import normalize_title, similarity


def _normalized_titles(existing: Sequence[ExistingRecord]):
    """Yield (record, normalized title) pairs, skipping records without a usable title."""
    for record in existing:
        if not isinstance(record.title, str):
            continue
        title = normalize_title(record.title)
        if title:
            yield record, title


def find_exact_title_match(title: str, existing: Sequence[ExistingRecord]) -> Optional[ExistingRecord]:
    """
    Return the first record whose normalized title equals `title`.

    Args:
        title (str): Already-normalized candidate title.
        existing (Sequence[ExistingRecord]): Records in caller order.

    Returns:
        Optional[ExistingRecord]: First exact match, or None.
    """
    for record, existing_title in _normalized_titles(existing):
        if existing_title == title:
            return record
    return None


def find_similar_title_match(
    title: str,
    existing: Sequence[ExistingRecord],
    threshold: float = FUZZY_TITLE_THRESHOLD,
) -> Optional[Tuple[ExistingRecord, float]]:
    """
    Return the first record whose title similarity strictly exceeds `threshold`.

    This is first-match-above-threshold, not best-of-all: the order of
    `existing` decides which record wins when several qualify.

    Returns:
        Optional[Tuple[ExistingRecord, float]]: (record, score), or None.
    """
    for record, existing_title in _normalized_titles(existing):
        score = similarity(title, existing_title)
        if score > threshold:
            return record, score
    return None


def match_campaign(candidate: CandidateRecord, existing: Sequence[ExistingRecord]) -> MatchResult:
    """
    Match a campaign by title similarity, keeping the best record above CAMPAIGN_THRESHOLD.

    Campaign titles carry no structured fields, so only the title is compared.
    """
    best = MatchResult(found=False, match_score=0.0, match_reason=MatchReason.NO_MATCH)
    if not isinstance(candidate.title, str) or not candidate.title.strip():
        return best

    title = normalize_title(candidate.title)
    for record, existing_title in _normalized_titles(existing):
        score = similarity(title, existing_title)
        if score > CAMPAIGN_THRESHOLD and score > best.match_score:
            best = MatchResult(
                found=True,
                record=record,
                match_score=score,
                match_reason=MatchReason.TITLE_SIMILARITY,
                details=[f"Title similarity: {score * 100:.0f}%"],
            )

    if best.found:
        logger.debug(f"Campaign '{candidate.title}' matched '{best.record.title}' ({best.match_score:.3f})")
    return best
