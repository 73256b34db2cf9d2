"""
Trip data file loading/saving for Trip Splitter

The JSON layout matches the data files the web version of the app
exported, so those files load unchanged:

    {"families": [{"id", "name"}],
     "activities": [{"id", "name", "cost", "currency", "paidBy", "date",
                     "participants": [{"familyId", "count"}]}],
     "exportDate": "...", "version": "1.0"}
"""
from __future__ import annotations
import json
import logging
import os
from datetime import datetime

from errors import FormatError
from models import Activity, Currency, Family, Participant, Trip
from utils import app_dir, new_id, parse_any_date, today_str

logger = logging.getLogger(__name__)

DATA_FILE_NAME = "trip.json"


def default_trip_path() -> str:
    return os.path.join(app_dir(), DATA_FILE_NAME)


def trip_to_dict(trip: Trip) -> dict:
    """Convert Trip object to dictionary for JSON serialization"""
    return {
        "families": [{"id": f.id, "name": f.name} for f in trip.families],
        "activities": [
            {
                "id": a.id,
                "name": a.name,
                "cost": a.cost,
                "currency": a.currency.value,
                "paidBy": a.paid_by,
                "date": a.date,
                "participants": [
                    {"familyId": p.family_id, "count": p.count} for p in a.participants
                ],
            } for a in trip.activities
        ],
        "exportDate": datetime.now().isoformat(timespec="seconds"),
        "version": trip.version,
    }


def _activity_from_dict(d: dict) -> Activity:
    # older files stored full timestamps and sometimes no date at all
    parsed = parse_any_date(str(d.get("date", "")))
    return Activity(
        id=str(d.get("id") or new_id()),
        name=str(d["name"]),
        cost=float(d["cost"]),
        currency=Currency.parse(d.get("currency")),
        paid_by=str(d["paidBy"]),
        date=parsed.isoformat() if parsed else today_str(),
        participants=[
            Participant(str(p["familyId"]), int(p["count"]))
            for p in d.get("participants", [])
            if int(p["count"]) > 0
        ],
    )


def dict_to_trip(d: dict) -> Trip:
    """
    Convert dictionary from JSON to Trip object.
    Raises FormatError if the families/activities lists are missing.
    """
    if not isinstance(d, dict):
        raise FormatError("Invalid trip data: expected a JSON object", {"type": type(d).__name__})
    if not isinstance(d.get("families"), list) or not isinstance(d.get("activities"), list):
        raise FormatError("Invalid trip data: 'families' and 'activities' lists are required")
    try:
        families = [Family(str(f["id"]), str(f["name"])) for f in d["families"]]
        activities = [_activity_from_dict(a) for a in d["activities"]]
    except (KeyError, TypeError, ValueError) as ex:
        raise FormatError(f"Invalid trip data: {ex}") from ex
    return Trip(families=families, activities=activities, version=str(d.get("version", "1.0")))


def save_trip(trip: Trip, path: str) -> None:
    with open(path, "w", encoding="utf-8") as f:
        json.dump(trip_to_dict(trip), f, indent=2)
    logger.info("Saved %d families and %d activities to %s",
                len(trip.families), len(trip.activities), path)


def load_trip(path: str) -> Trip:
    """Load a trip data file; a missing file gives an empty trip"""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        logger.debug("No trip file at %s", path)
        return Trip(families=[], activities=[])
    except json.JSONDecodeError as ex:
        raise FormatError(f"Trip file is not valid JSON: {ex}") from ex
    return dict_to_trip(data)
