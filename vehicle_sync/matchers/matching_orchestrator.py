# vehicle_sync/matchers/matching_orchestrator.py

from typing import Callable, List, Sequence
from loguru import logger

from vehicle_sync.config import EXACT_MATCH_SCORE, FUZZY_TITLE_THRESHOLD, STRUCTURED_ACCEPT_THRESHOLD
from vehicle_sync.errors import InvalidInputError
from vehicle_sync.models import CandidateRecord, ExistingRecord, MatchReason, MatchResult
from vehicle_sync.matchers.similarity import normalize_title
from vehicle_sync.matchers.structured_matcher import structured_match
from vehicle_sync.matchers.title_matcher import find_exact_title_match, find_similar_title_match

PrimaryStrategy = Callable[[CandidateRecord, Sequence[ExistingRecord]], MatchResult]


def _validate_candidate(candidate: CandidateRecord) -> None:
    if not isinstance(candidate, CandidateRecord):
        raise InvalidInputError(f"candidate must be a CandidateRecord, got {type(candidate).__name__}")
    if not isinstance(candidate.title, str):
        raise InvalidInputError(f"candidate title must be a string, got {type(candidate.title).__name__}")


def _validate_existing(existing: Sequence[ExistingRecord]) -> List[ExistingRecord]:
    if existing is None or isinstance(existing, (str, bytes)):
        raise InvalidInputError("existing must be a sequence of ExistingRecord")
    records = list(existing)
    for record in records:
        if not isinstance(record, ExistingRecord):
            raise InvalidInputError(f"existing entries must be ExistingRecord, got {type(record).__name__}")
    return records


def match_record(
    candidate: CandidateRecord,
    existing: Sequence[ExistingRecord],
    primary: PrimaryStrategy = structured_match,
) -> MatchResult:
    """
    Decide whether a scraped vehicle already exists among the stored records.

    Strategies run in fixed precedence and the first one to clear its
    threshold wins:
      1. primary structured scorer, accepted when score > 0.7
      2. exact normalized title, first in list order (score 1.0)
      3. title similarity > 0.9, first in list order
    A candidate with a blank title short-circuits to "no_title".

    Args:
        candidate (CandidateRecord): Incoming vehicle.
        existing (Sequence[ExistingRecord]): Known vehicles, in caller order.
        primary (PrimaryStrategy): Multi-field strategy tried first.

    Returns:
        MatchResult: Decision with score and reason code.

    Raises:
        InvalidInputError: On wrongly typed candidate, title or existing entries.
    """
    _validate_candidate(candidate)

    # Existing records are not looked at for a blank title
    title = normalize_title(candidate.title)
    if not title:
        logger.debug("❌ No title to match against")
        return MatchResult(found=False, match_score=0.0, match_reason=MatchReason.NO_TITLE)

    records = _validate_existing(existing)

    logger.debug(f"🔍 Looking for matches for '{candidate.title}' among {len(records)} records")

    # 1) Structured multi-field scorer
    result = primary(candidate, records)
    if result.found and result.match_score is not None and result.match_score > STRUCTURED_ACCEPT_THRESHOLD:
        return result

    # 2) Exact title fallback
    exact = find_exact_title_match(title, records)
    if exact is not None:
        logger.debug(f"🎯 Exact title match: '{exact.title}' (id={exact.id})")
        return MatchResult(
            found=True,
            record=exact,
            match_score=EXACT_MATCH_SCORE,
            match_reason=MatchReason.EXACT_TITLE,
        )

    # 3) High-similarity fallback
    similar = find_similar_title_match(title, records, threshold=FUZZY_TITLE_THRESHOLD)
    if similar is not None:
        record, score = similar
        logger.debug(f"🎯 High similarity match: '{record.title}' ({score * 100:.1f}% similar)")
        return MatchResult(
            found=True,
            record=record,
            match_score=score,
            match_reason=MatchReason.HIGH_TITLE_SIMILARITY,
        )

    logger.debug(f"No suitable match for '{candidate.title}'")
    return MatchResult(found=False, match_score=0.0, match_reason=MatchReason.NO_MATCH)
