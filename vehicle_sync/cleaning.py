"""
Whitelisting of scraped vehicle payloads into the CMS vehicle shape.

Only known fields are forwarded; matcher-only keys (model tokens, brand
names, body type hints) never reach the CMS.
"""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from vehicle_sync.errors import InvalidPayloadError

# CMS field -> allowed keys per financing option
FINANCING_FIELDS = {
    "privatleasing": ("monthly_price", "period_months", "annual_mileage", "down_payment", "conditions"),
    "company_leasing": (
        "monthly_price", "period_months", "annual_mileage", "down_payment", "benefit_value", "conditions",
    ),
    "loan": ("monthly_price", "period_months", "interest_rate", "down_payment_percent", "total_amount", "conditions"),
}

# Flat price field of the older scraper format -> financing option list
FLAT_FINANCING_FIELDS = {
    "privatleasing": "privatleasing",
    "company_leasing_price": "company_leasing",
    "loan_price": "loan",
}


def _text(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _positive(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and value > 0


def _thumbnail(data: Dict[str, Any]) -> Optional[str]:
    # apiThumbnail wins over thumbnail when both are given
    return _text(data.get("apiThumbnail")) or _text(data.get("thumbnail"))


def _clean_option(option: Dict[str, Any], fields) -> Dict[str, Any]:
    return {key: option[key] for key in fields if option.get(key)}


def _keep_option(option_type: str, option: Any) -> bool:
    if not isinstance(option, dict):
        return False
    if option_type == "loan":
        return any(_positive(option.get(key)) for key in ("monthly_price", "total_amount", "interest_rate"))
    return _positive(option.get("monthly_price"))


def clean_financing_options(model: Dict[str, Any]) -> Dict[str, List[Dict[str, Any]]]:
    """
    Build the three financing option lists of a vehicle model.

    Nested `financing_options` take precedence; otherwise flat
    `privatleasing` / `company_leasing_price` / `loan_price` amounts are
    converted to single-entry lists.
    """
    cleaned = {option_type: [] for option_type in FINANCING_FIELDS}

    nested = model.get("financing_options")
    if isinstance(nested, dict):
        for option_type, fields in FINANCING_FIELDS.items():
            options = nested.get(option_type)
            if isinstance(options, list):
                cleaned[option_type] = [
                    _clean_option(option, fields) for option in options if _keep_option(option_type, option)
                ]
        return cleaned

    for flat_key, option_type in FLAT_FINANCING_FIELDS.items():
        amount = model.get(flat_key)
        if _positive(amount):
            cleaned[option_type] = [{"monthly_price": amount}]
    return cleaned


def clean_vehicle_model(model: Dict[str, Any]) -> Dict[str, Any]:
    cleaned: Dict[str, Any] = {"name": _text(model.get("name")) or "Unknown Model"}
    for key in ("price", "old_price"):
        if _positive(model.get(key)):
            cleaned[key] = model[key]
    thumbnail = _thumbnail(model)
    if thumbnail:
        cleaned["apiThumbnail"] = thumbnail
    cleaned["financing_options"] = clean_financing_options(model)
    return cleaned


def clean_vehicle_data(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Turn a scraped vehicle payload into a CMS-safe vehicle document.

    Args:
        data: Scraped vehicle JSON.

    Returns:
        Dict[str, Any]: Draft vehicle with only whitelisted fields.

    Raises:
        InvalidPayloadError: If the payload is not a dict or has no usable title.
    """
    if not isinstance(data, dict):
        raise InvalidPayloadError(f"Vehicle payload must be an object, got {type(data).__name__}")
    title = _text(data.get("title"))
    if title is None:
        raise InvalidPayloadError("Title is required")

    result: Dict[str, Any] = {
        "title": title,
        "publishedAt": datetime.now(timezone.utc).isoformat(),
        "_status": "draft",
    }
    for key in ("description", "free_text", "bilmarken"):
        value = _text(data.get(key))
        if value:
            result[key] = value

    thumbnail = _thumbnail(data)
    if thumbnail:
        result["apiThumbnail"] = thumbnail

    models = data.get("vehicle_model")
    if isinstance(models, list):
        result["vehicle_model"] = [clean_vehicle_model(m) for m in models if isinstance(m, dict)]

    return result
