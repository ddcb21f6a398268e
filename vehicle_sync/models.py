"""
Typed data models for the vehicle deduplication and import pipeline.
All data structures used throughout the codebase should be defined here.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


class MatchReason:
    """Reason codes reported on a MatchResult."""
    STRUCTURED = "structured_match"
    EXACT_TITLE = "exact_title_match"
    HIGH_TITLE_SIMILARITY = "high_title_similarity"
    TITLE_SIMILARITY = "title_similarity"  # campaign matching
    NO_TITLE = "no_title"
    NO_MATCH = "no_match_found"


class ImportAction:
    """Per-item outcome of a create-or-update import."""
    CREATED = "created"
    UPDATED = "updated"
    ERROR = "error"


def _token_list(value: Any) -> Optional[List[str]]:
    # A single extracted token may arrive as a bare string
    if isinstance(value, str):
        return [value]
    if isinstance(value, (list, tuple)):
        return [t for t in value if isinstance(t, str)]
    return None


def _brand_name(value: Any) -> Optional[str]:
    # CMS relations come back either as an id or as a populated document
    if isinstance(value, dict):
        return value.get("title") or value.get("name")
    if isinstance(value, str):
        return value
    return None


@dataclass
class VehicleModel:
    """A single trim/variant of a vehicle with its prices."""
    name: str
    price: Optional[float] = None
    old_price: Optional[float] = None
    thumbnail: Optional[str] = None
    financing_options: Optional[Dict[str, Any]] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VehicleModel":
        return cls(
            name=data.get("name") or "",
            price=data.get("price"),
            old_price=data.get("old_price"),
            thumbnail=data.get("thumbnail") or data.get("apiThumbnail"),
            financing_options=data.get("financing_options"),
        )


@dataclass
class CandidateRecord:
    """Freshly scraped/extracted vehicle awaiting a create-or-update decision."""
    title: str
    brand: Optional[str] = None
    description: Optional[str] = None
    body_type: Optional[str] = None
    vehicle_models: List[VehicleModel] = field(default_factory=list)
    model_tokens: Optional[List[str]] = None  # derived from the title when not given
    free_text: Optional[str] = None
    thumbnail: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CandidateRecord":
        """Build a candidate from scraper/CMS JSON. A missing title becomes an empty string."""
        models = data.get("vehicle_model") or data.get("vehicle_models") or []
        return cls(
            title=data.get("title", ""),
            brand=_brand_name(data.get("brand")),
            description=data.get("description"),
            body_type=data.get("body_type") or data.get("bodyType"),
            vehicle_models=[VehicleModel.from_dict(m) for m in models if isinstance(m, dict)],
            model_tokens=_token_list(data.get("model_tokens") or data.get("modelTokens")),
            free_text=data.get("free_text"),
            thumbnail=data.get("thumbnail") or data.get("apiThumbnail"),
        )


@dataclass
class ExistingRecord:
    """Vehicle previously persisted in the CMS."""
    id: str
    title: Optional[str]
    brand: Optional[str] = None
    body_type: Optional[str] = None
    vehicle_models: List[VehicleModel] = field(default_factory=list)
    model_tokens: Optional[List[str]] = None
    updated_at: Optional[str] = None
    data: Dict[str, Any] = field(default_factory=dict, repr=False)  # raw CMS document

    @classmethod
    def from_cms_doc(cls, doc: Dict[str, Any]) -> "ExistingRecord":
        """Build an existing record from a CMS document (depth >= 1 populates the brand)."""
        models = doc.get("vehicle_model") or []
        return cls(
            id=str(doc["id"]),
            title=doc.get("title"),
            brand=_brand_name(doc.get("brand") or doc.get("bilmarken")),
            body_type=doc.get("body_type") or doc.get("bodyType"),
            vehicle_models=[VehicleModel.from_dict(m) for m in models if isinstance(m, dict)],
            updated_at=doc.get("updatedAt"),
            data=doc,
        )


@dataclass
class MatchResult:
    """Outcome of matching one candidate against the existing records."""
    found: bool
    match_reason: str
    record: Optional[ExistingRecord] = None
    match_score: Optional[float] = None
    details: List[str] = field(default_factory=list)  # human-readable scorer signals


@dataclass
class ImportOutcome:
    """Result of importing a single vehicle into the CMS."""
    title: str
    success: bool
    action: str  # created | updated | error
    id: Optional[str] = None
    match_score: Optional[float] = None
    match_reason: Optional[str] = None
    error: Optional[str] = None


@dataclass
class BatchSummary:
    """Totals and per-item outcomes for one import batch."""
    created: int = 0
    updated: int = 0
    failed: int = 0
    total: int = 0
    results: List[ImportOutcome] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.failed == 0
