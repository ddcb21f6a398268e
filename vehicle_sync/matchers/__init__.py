"""Record matching strategies for vehicle deduplication."""
from vehicle_sync.matchers.similarity import similarity, normalize_title, normalize_vehicle_name
from vehicle_sync.matchers.structured_matcher import structured_match, score_vehicle_match
from vehicle_sync.matchers.title_matcher import match_campaign
from vehicle_sync.matchers.matching_orchestrator import match_record

__all__ = [
    "similarity",
    "normalize_title",
    "normalize_vehicle_name",
    "structured_match",
    "score_vehicle_match",
    "match_campaign",
    "match_record",
]
