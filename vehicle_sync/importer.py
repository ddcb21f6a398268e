"""
Create-or-update import of scraped vehicles into the CMS.

Items in a batch are processed strictly in order against one snapshot of the
stored vehicles. Each newly created vehicle is appended to that snapshot so
later items in the same batch are deduplicated against it.
"""
from typing import Any, Dict, List, Optional, Sequence
from loguru import logger

from vehicle_sync.cleaning import clean_vehicle_data
from vehicle_sync.clients import CMSClient
from vehicle_sync.config import EXISTING_FETCH_LIMIT, VEHICLE_COLLECTION
from vehicle_sync.matchers.matching_orchestrator import match_record
from vehicle_sync.merge import merge_vehicle_data
from vehicle_sync.models import BatchSummary, CandidateRecord, ExistingRecord, ImportAction, ImportOutcome

# CMS bookkeeping fields never sent back on update
_READ_ONLY_FIELDS = ("id", "createdAt", "updatedAt")


async def fetch_existing_records(client: CMSClient) -> List[ExistingRecord]:
    """
    Fetch stored vehicles for deduplication. Falls back to an empty list on failure.
    """
    try:
        docs = await client.list_records(VEHICLE_COLLECTION, limit=EXISTING_FETCH_LIMIT, depth=1)
    except Exception as e:
        logger.warning(f"⚠️ Error fetching existing vehicles, continuing without deduplication: {e}")
        return []

    records = [ExistingRecord.from_cms_doc(doc) for doc in docs if isinstance(doc, dict) and "id" in doc]
    logger.info(f"📈 Found {len(records)} existing vehicles for matching")
    for i, record in enumerate(records[:5]):
        logger.debug(f"  {i + 1}. '{record.title}' (ID: {record.id})")
    return records


async def _resolve_brand(client: CMSClient, brand: Any) -> Optional[str]:
    """Look up or create the CMS brand; a failure leaves the vehicle without a brand."""
    if not isinstance(brand, str) or not brand.strip():
        return None
    try:
        return await client.find_or_create_brand(brand)
    except Exception as e:
        logger.warning(f"⚠️ Error handling brand '{brand}', importing without it: {e}")
        return None


def _update_body(record: ExistingRecord, body: Dict[str, Any], merge: bool) -> Dict[str, Any]:
    if not merge:
        return body
    merged = merge_vehicle_data(record.data, body)
    if "bilmarken" in body:
        merged["bilmarken"] = body["bilmarken"]
    for key in _READ_ONLY_FIELDS:
        merged.pop(key, None)
    return merged


async def import_vehicle(
    client: CMSClient,
    payload: Dict[str, Any],
    existing: List[ExistingRecord],
    merge: bool = False,
) -> ImportOutcome:
    """
    Import a single scraped vehicle: update its match or create it.

    Args:
        client (CMSClient): CMS client.
        payload (Dict[str, Any]): Scraped vehicle JSON (title, brand, vehicle_model, ...).
        existing (List[ExistingRecord]): Known vehicles; created records are appended.
        merge (bool): Merge into the stored document instead of overwriting fields.

    Returns:
        ImportOutcome: "updated" or "created" outcome.
    """
    # Validation runs before any brand lookup or write
    body = clean_vehicle_data(payload)
    candidate = CandidateRecord.from_dict(payload)
    logger.debug(f"🔍 Processing vehicle: '{candidate.title}'")

    result = match_record(candidate, existing)
    brand_id = await _resolve_brand(client, payload.get("brand"))
    if brand_id:
        body["bilmarken"] = brand_id
    logger.debug(
        f"🎯 Match result: found={result.found}, score={result.match_score:.3f}, reason={result.match_reason}"
    )

    if result.found and result.record is not None:
        record = result.record
        try:
            doc = await client.update_record(VEHICLE_COLLECTION, record.id, _update_body(record, body, merge))
            logger.info(f"🔄 Updated '{record.title}' ({result.match_score * 100:.1f}% {result.match_reason})")
            return ImportOutcome(
                title=candidate.title,
                success=True,
                action=ImportAction.UPDATED,
                id=str(doc.get("id", record.id)),
                match_score=result.match_score,
                match_reason=result.match_reason,
            )
        except Exception as e:
            logger.error(f"❌ Error updating record {record.id}, creating a new one instead: {e}")

    doc = await client.create_record(VEHICLE_COLLECTION, body)
    existing.append(
        ExistingRecord(
            id=str(doc["id"]),
            title=doc.get("title") or candidate.title,
            brand=candidate.brand,
            body_type=candidate.body_type,
            vehicle_models=list(candidate.vehicle_models),
            model_tokens=candidate.model_tokens,
            data=doc,
        )
    )
    logger.info(f"➕ Created '{candidate.title}' (ID: {doc['id']})")
    return ImportOutcome(
        title=candidate.title,
        success=True,
        action=ImportAction.CREATED,
        id=str(doc["id"]),
        match_score=result.match_score,
        match_reason=result.match_reason,
    )


async def import_batch(
    client: CMSClient,
    payloads: Sequence[Dict[str, Any]],
    merge: bool = False,
) -> BatchSummary:
    """
    Import a batch of scraped vehicles sequentially.

    A failing item is recorded as an "error" outcome and the batch continues.
    Pacing against the CMS comes from the client's rate limiter.

    Returns:
        BatchSummary: Created/updated/failed totals and per-item outcomes.
    """
    existing = await fetch_existing_records(client)
    summary = BatchSummary(total=len(payloads))
    logger.info(f"🚀 Batch processing: {len(payloads)} items")

    for index, payload in enumerate(payloads):
        title = payload.get("title") if isinstance(payload, dict) else None
        logger.debug(f"--- Item {index + 1}/{len(payloads)}: '{title}' ---")
        try:
            outcome = await import_vehicle(client, payload, existing, merge=merge)
        except Exception as e:
            logger.error(f"❌ Item {index + 1} failed: {e}")
            outcome = ImportOutcome(
                title=title if isinstance(title, str) and title else "Unknown",
                success=False,
                action=ImportAction.ERROR,
                error=str(e),
            )

        summary.results.append(outcome)
        if outcome.action == ImportAction.CREATED:
            summary.created += 1
        elif outcome.action == ImportAction.UPDATED:
            summary.updated += 1
        else:
            summary.failed += 1

    rate = round((summary.created + summary.updated) / summary.total * 100) if summary.total else 100
    logger.info(
        f"📊 Batch done: {summary.created} created, {summary.updated} updated, "
        f"{summary.failed} failed of {summary.total} ({rate}% success)"
    )
    return summary
