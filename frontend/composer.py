import json
import logging
import os
import uuid
from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional

from callables.schemas import EventCreationRequest, RecurringInput

logger = logging.getLogger(__name__)

START_OFFSET = timedelta(hours=24)
DURATION = timedelta(hours=5)

REFERENCE_FIELDS = ("tableLayouts", "categories", "clubCardIds", "eventGenre")

# Placeholder document ids; replace with ids from the company's
# layouts / categories / clubCards / genres collections.
DEFAULT_REFERENCE_IDS: Dict[str, List[str]] = {
    "tableLayouts": ["layout_document_id_1", "layout_document_id_2"],
    "categories": ["category_document_id_1", "category_document_id_2"],
    "clubCardIds": ["clubcard_document_id_1", "clubcard_document_id_2"],
    "eventGenre": ["genre_document_id_1", "genre_document_id_2"],
}


class FieldValidationError(ValueError):
    def __init__(self, errors: Dict[str, str]):
        self.errors = errors
        super().__init__("; ".join(f"{k}: {v}" for k, v in errors.items()))


class ReferenceIdsError(ValueError):
    pass


def load_reference_ids(path: Optional[str] = None) -> Dict[str, List[str]]:
    """Pre-populated reference lists for the form.

    Reads a JSON object keyed by the wire field names from ``path`` (or the
    EVENT_REFERENCE_IDS env var); missing keys fall back to the placeholders.
    """
    path = path or os.getenv("EVENT_REFERENCE_IDS")
    ids = {k: list(v) for k, v in DEFAULT_REFERENCE_IDS.items()}
    if not path:
        return ids

    try:
        with open(path, "r", encoding="utf-8") as f:
            loaded = json.load(f)
    except (OSError, ValueError) as e:
        raise ReferenceIdsError(f"Cannot read reference ids from {path} (EVENT_REFERENCE_IDS): {e}") from e

    if not isinstance(loaded, dict):
        raise ReferenceIdsError(
            f"Reference ids file {path} (EVENT_REFERENCE_IDS) must hold a JSON object, "
            f"got {type(loaded).__name__}"
        )
    for field in REFERENCE_FIELDS:
        if field not in loaded:
            continue
        if not isinstance(loaded[field], list):
            raise ReferenceIdsError(f"'{field}' in {path} (EVENT_REFERENCE_IDS) must be a list of ids")
        ids[field] = [str(x) for x in loaded[field]]
    logger.info("loaded reference ids from %s", path)
    return ids


def _validate_recurring(recurring: RecurringInput) -> Optional[str]:
    if not recurring.is_recurring:
        return None
    missing = [
        name
        for name, value in (
            ("recurringStartDate", recurring.recurring_start_date),
            ("recurringEndDate", recurring.recurring_end_date),
            ("daysOfWeek", recurring.days_of_week),
        )
        if not value
    ]
    if missing:
        return f"Recurring events need {', '.join(missing)}"
    if any(d < 0 or d > 6 for d in recurring.days_of_week):
        return "Days of week must be between 0 (Sunday) and 6 (Saturday)"
    return None


def validate_fields(
    event_name: Optional[str],
    company_id: Optional[str],
    recurring: Optional[RecurringInput] = None,
) -> Dict[str, str]:
    errors = {}
    if not (event_name or "").strip():
        errors["eventName"] = "Please enter an event name"
    if not (company_id or "").strip():
        errors["companyId"] = "Please enter a company ID"
    if recurring is not None:
        msg = _validate_recurring(recurring)
        if msg:
            errors["recurring"] = msg
    return errors


def compose_request(
    event_name: str,
    company_id: str,
    *,
    table_layouts: Iterable[str] = (),
    categories: Iterable[str] = (),
    club_card_ids: Iterable[str] = (),
    event_genre: Iterable[str] = (),
    now: Optional[datetime] = None,
    start_offset: timedelta = START_OFFSET,
    duration: timedelta = DURATION,
    additional_guest_lists: Optional[List[str]] = None,
    recurring: Optional[RecurringInput] = None,
) -> EventCreationRequest:
    """Build a fresh createEvent request.

    Raises FieldValidationError before anything is built when a required
    field is empty. Start defaults to now + 24h and end to start + 5h.
    """
    errors = validate_fields(event_name, company_id, recurring)
    if errors:
        raise FieldValidationError(errors)

    now = now or datetime.now(timezone.utc)
    start = now + start_offset
    end = start + duration

    return EventCreationRequest(
        event_id=str(uuid.uuid4()),
        event_name=event_name.strip(),
        start_date_time=start.isoformat(),
        end_date_time=end.isoformat(),
        company_id=company_id.strip(),
        table_layouts=list(table_layouts),
        categories=list(categories),
        club_card_ids=list(club_card_ids),
        event_genre=list(event_genre),
        additional_guest_lists=additional_guest_lists,
        recurring=recurring,
    )


def parse_id_list(text: str) -> List[str]:
    """Split a text area value into ids (one per line or comma separated)."""
    ids = []
    for line in (text or "").replace(",", "\n").splitlines():
        line = line.strip()
        if line:
            ids.append(line)
    return ids
