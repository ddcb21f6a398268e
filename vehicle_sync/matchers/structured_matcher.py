from dataclasses import dataclass, field
from typing import List, Sequence, Set
from loguru import logger

from vehicle_sync.config import (
    BODY_TYPE_WEIGHT,
    BRAND_WEIGHT,
    MODEL_NAME_THRESHOLD,
    MODEL_PRICE_TOLERANCE,
    MODEL_WEIGHT,
    STRUCTURED_CANDIDATE_THRESHOLD,
    TITLE_WEIGHT,
)
from vehicle_sync.models import CandidateRecord, ExistingRecord, MatchReason, MatchResult, VehicleModel
from vehicle_sync.matchers.similarity import (
    normalize_title,
    normalize_vehicle_name,
    price_proximity,
    similarity,
)


@dataclass
class StructuredScore:
    """Weighted multi-field score of one candidate/existing pair."""
    total: float
    title_score: float
    reasons: List[str] = field(default_factory=list)


def _has_title(record) -> bool:
    return isinstance(record.title, str) and bool(record.title.strip())


def _same_text(a, b) -> bool:
    if not a or not b:
        return False
    return normalize_title(a) == normalize_title(b)


def model_tokens_for(record) -> Set[str]:
    """Model tokens of a record, derived from its title when none were extracted."""
    if isinstance(record.model_tokens, str):
        tokens = [normalize_vehicle_name(record.model_tokens)]
    elif record.model_tokens:
        tokens = [normalize_vehicle_name(t) for t in record.model_tokens if isinstance(t, str)]
    elif _has_title(record):
        tokens = normalize_vehicle_name(record.title).split()
    else:
        tokens = []
    return {t for t in tokens if t}


def _prices_compatible(a: VehicleModel, b: VehicleModel) -> bool:
    if a.price is None or b.price is None:
        return True
    return price_proximity(a.price, b.price) >= 1.0 - MODEL_PRICE_TOLERANCE


def model_overlap(new_models: Sequence[VehicleModel], existing_models: Sequence[VehicleModel]) -> float:
    """
    Share of vehicle models that appear on both sides.

    A new model counts once if any existing model has a similar normalized
    name and, when both prices are known, a price within tolerance.
    """
    if not new_models or not existing_models:
        return 0.0

    match_count = 0
    for new_model in new_models:
        if not new_model.name:
            continue
        new_name = normalize_vehicle_name(new_model.name)
        for existing_model in existing_models:
            if not existing_model.name:
                continue
            name_score = similarity(new_name, normalize_vehicle_name(existing_model.name))
            if name_score > MODEL_NAME_THRESHOLD and _prices_compatible(new_model, existing_model):
                match_count += 1
                break

    return match_count / max(len(new_models), len(existing_models))


def token_overlap(a: Set[str], b: Set[str]) -> float:
    """Jaccard overlap of two token sets."""
    if not a or not b:
        return 0.0
    return len(a & b) / len(a | b)


def score_vehicle_match(candidate: CandidateRecord, existing: ExistingRecord) -> StructuredScore:
    """
    Combine title, brand, model and body-type signals into one weighted score.

    Args:
        candidate (CandidateRecord): Incoming scraped vehicle.
        existing (ExistingRecord): Stored vehicle to compare against.

    Returns:
        StructuredScore: Total in [0, 1], raw title similarity and the signals that fired.
    """
    if not _has_title(candidate) or not _has_title(existing):
        return StructuredScore(total=0.0, title_score=0.0, reasons=["Missing title data"])

    reasons: List[str] = []
    total = 0.0
    max_score = TITLE_WEIGHT + BRAND_WEIGHT + MODEL_WEIGHT + BODY_TYPE_WEIGHT

    title_score = similarity(
        normalize_vehicle_name(candidate.title),
        normalize_vehicle_name(existing.title),
    )
    total += title_score * TITLE_WEIGHT
    if title_score > 0.8:
        reasons.append(f"Title match: {title_score * 100:.0f}%")

    if _same_text(candidate.brand, existing.brand):
        total += BRAND_WEIGHT
        reasons.append("Same brand")

    if candidate.vehicle_models and existing.vehicle_models:
        overlap = model_overlap(candidate.vehicle_models, existing.vehicle_models)
    else:
        overlap = token_overlap(model_tokens_for(candidate), model_tokens_for(existing))
    total += overlap * MODEL_WEIGHT
    if overlap > 0.5:
        reasons.append(f"Model overlap: {overlap * 100:.0f}%")

    if _same_text(candidate.body_type, existing.body_type):
        total += BODY_TYPE_WEIGHT
        reasons.append("Same body type")

    return StructuredScore(total=total / max_score, title_score=title_score, reasons=reasons)


def structured_match(candidate: CandidateRecord, existing: Sequence[ExistingRecord]) -> MatchResult:
    """
    Find the best-scoring existing vehicle for a candidate across all records.

    Only records scoring at least STRUCTURED_CANDIDATE_THRESHOLD are
    considered; records without a title are skipped.

    Returns:
        MatchResult: Best match (reason "structured_match"), or a not-found result.
    """
    best = MatchResult(found=False, match_score=0.0, match_reason=MatchReason.NO_MATCH)
    if not _has_title(candidate):
        return best

    for record in existing:
        if not _has_title(record):
            continue
        score = score_vehicle_match(candidate, record)
        if score.total >= STRUCTURED_CANDIDATE_THRESHOLD and score.total > best.match_score:
            best = MatchResult(
                found=True,
                record=record,
                match_score=score.total,
                match_reason=MatchReason.STRUCTURED,
                details=score.reasons,
            )

    if best.found:
        logger.debug(f"Structured match for '{candidate.title}': '{best.record.title}' ({best.match_score:.3f}) {best.details}")
    return best
