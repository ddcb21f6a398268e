import os
import asyncio
import csv
import json
import pandas as pd
from typing import Any, Dict, List
import sys
from loguru import logger

from vehicle_sync.models import BatchSummary
from vehicle_sync.importer import import_batch
from vehicle_sync.config import INPUT_JSON, INPUT_CSV, OUTPUT_CSV, LOG_LEVEL
from vehicle_sync.clients import CMSClient

CSV_COLUMNS = ["title", "brand", "description", "body_type", "free_text", "thumbnail"]


def load_vehicles_from_json(file_path: str) -> List[Dict[str, Any]]:
    """Load scraped vehicles from a JSON file holding a list (or {"items": [...]})."""
    with open(file_path) as f:
        data = json.load(f)
    if isinstance(data, dict):
        data = data.get("items", [])
    return [item for item in data if isinstance(item, dict)]


def load_vehicles_from_csv(file_path: str, nrows: int = None) -> List[Dict[str, Any]]:
    """Load scraped vehicles from CSV, dropping empty cells."""
    df = pd.read_csv(file_path, nrows=nrows)
    vehicles = []
    for _, row in df.iterrows():
        vehicle = {}
        for col in CSV_COLUMNS:
            if col in row.index and pd.notna(row[col]):
                vehicle[col] = str(row[col])
        vehicle.setdefault("title", "")
        vehicles.append(vehicle)
    return vehicles


def load_vehicles() -> List[Dict[str, Any]]:
    if os.path.exists(INPUT_JSON):
        return load_vehicles_from_json(INPUT_JSON)
    return load_vehicles_from_csv(INPUT_CSV)


def write_results(summary: BatchSummary, output_path: str) -> None:
    with open(output_path, "w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(["title", "action", "id", "matchScore", "matchReason", "error"])
        for result in summary.results:
            writer.writerow([
                result.title,
                result.action,
                result.id or "",
                "" if result.match_score is None else f"{result.match_score:.3f}",
                result.match_reason or "",
                result.error or "",
            ])


async def main():
    """
    Run one import batch.

    - Loads scraped vehicles from JSON (or CSV).
    - Creates or updates each vehicle in the CMS, deduplicating against stored ones.
    - Writes per-item outcomes to the output CSV.
    """
    logger.remove()  # Remove default handler
    logger.add(sys.stderr, level=LOG_LEVEL, format="<green>{time:HH:mm:ss}</green> | <level>{message}</level>")

    vehicles = load_vehicles()
    client = CMSClient()
    try:
        summary = await import_batch(client, vehicles, merge=os.getenv("MERGE_EXISTING") == "1")
        write_results(summary, OUTPUT_CSV)
    finally:
        # Cleanup: close the CMS session to prevent unclosed connector warnings
        await client.close()


if __name__ == "__main__":
    asyncio.run(main())
