"""
Merging of incoming scraped vehicle data into an existing CMS document.
"""
from typing import Any, Dict, List, Optional
from loguru import logger

from vehicle_sync.config import MODEL_NAME_THRESHOLD
from vehicle_sync.matchers.similarity import normalize_vehicle_name, similarity

FINANCING_TYPES = ("privatleasing", "company_leasing", "loan")
SAME_OPTION_PRICE_DELTA = 50
THUMBNAIL_KEYS = ("thumbnail", "apiThumbnail")


def _longer(existing: Optional[str], incoming: Optional[str]) -> Optional[str]:
    if incoming and (not existing or len(incoming) > len(existing)):
        return incoming
    return existing


def _is_generic_thumbnail(url: Optional[str]) -> bool:
    return not url or "generic" in url or "placeholder" in url


def merge_vehicle_data(existing: Optional[Dict[str, Any]], incoming: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Merge an incoming vehicle into an existing one, keeping the richer value per field.

    Args:
        existing: Stored CMS document.
        incoming: Freshly scraped vehicle payload.

    Returns:
        Dict[str, Any]: New merged document; inputs are not modified.
    """
    if not existing:
        logger.warning("⚠️ No existing vehicle data to merge with")
        return dict(incoming or {})
    if not incoming:
        logger.warning("⚠️ No new vehicle data to merge")
        return dict(existing)

    merged = dict(existing)
    for key in ("title", "description", "brand", "free_text"):
        value = _longer(existing.get(key), incoming.get(key))
        if value is not None:
            merged[key] = value

    for key in THUMBNAIL_KEYS:
        if incoming.get(key) and _is_generic_thumbnail(existing.get(key)):
            merged[key] = incoming[key]

    if isinstance(incoming.get("vehicle_model"), list):
        merged["vehicle_model"] = merge_vehicle_models(existing.get("vehicle_model") or [], incoming["vehicle_model"])

    return merged


def merge_vehicle_models(existing_models: List[Dict[str, Any]], new_models: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Update models with a similar name in place, append the rest as new variants."""
    merged = list(existing_models or [])
    for new_model in new_models or []:
        if not new_model or not new_model.get("name"):
            continue
        new_name = normalize_vehicle_name(new_model["name"])
        for i, current in enumerate(merged):
            if not current or not current.get("name"):
                continue
            if similarity(normalize_vehicle_name(current["name"]), new_name) > MODEL_NAME_THRESHOLD:
                merged[i] = merge_vehicle_model_data(current, new_model)
                break
        else:
            merged.append(new_model)
    return merged


def merge_vehicle_model_data(existing_model: Dict[str, Any], new_model: Dict[str, Any]) -> Dict[str, Any]:
    merged = dict(existing_model)

    for key in ("price", "old_price"):
        value = new_model.get(key)
        if value and value > 0:
            merged[key] = value

    for key in THUMBNAIL_KEYS:
        new_thumb = new_model.get(key)
        old_thumb = existing_model.get(key)
        if new_thumb and (_is_generic_thumbnail(old_thumb) or len(new_thumb) > len(old_thumb)):
            merged[key] = new_thumb

    if new_model.get("financing_options"):
        merged["financing_options"] = merge_financing_options(
            existing_model.get("financing_options") or {},
            new_model["financing_options"],
        )
    return merged


def merge_financing_options(existing: Dict[str, Any], new_options: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    merged = dict(existing)
    if not new_options:
        return merged

    for option_type in FINANCING_TYPES:
        options = new_options.get(option_type)
        if not isinstance(options, list) or not options:
            continue
        if not merged.get(option_type):
            merged[option_type] = options
        else:
            merged[option_type] = _merge_option_list(merged[option_type], options)
    return merged


def _same_option(a: Dict[str, Any], b: Dict[str, Any]) -> bool:
    price_diff = abs((a.get("monthly_price") or 0) - (b.get("monthly_price") or 0))
    period_a, period_b = a.get("period_months"), b.get("period_months")
    period_match = period_a == period_b or (not period_a and not period_b)
    return price_diff < SAME_OPTION_PRICE_DELTA and period_match


def _merge_option_list(existing: List[Dict[str, Any]], new_options: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    merged = list(existing)
    for option in new_options:
        if not option:
            continue
        index = next((i for i, current in enumerate(merged) if current and _same_option(current, option)), -1)
        if index >= 0:
            current = merged[index]
            # Non-null existing values win over incoming ones
            kept = {k: v for k, v in current.items() if v is not None}
            merged[index] = {**current, **option, **kept}
        else:
            merged.append(option)
    return merged
