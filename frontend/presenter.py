from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel

from callables.schemas import CallFailure, CallSuccess

from .controller import Phase, ScreenState

ENRICHED_FIELDS = {
    "tableLayouts": "Table Layouts",
    "categories": "Categories",
    "clubCardIds": "Club Cards",
    "eventGenre": "Event Genres",
}


class Banner(BaseModel):
    kind: Literal["success", "error"]
    text: str

    @property
    def is_error(self) -> bool:
        return self.kind == "error"


def present(state: ScreenState) -> Optional[Banner]:
    """Exactly one banner for a finished submission, none otherwise."""
    if state.phase == Phase.SUCCEEDED and isinstance(state.outcome, CallSuccess):
        return Banner(kind="success", text=f"Event created successfully! Event ID: {state.event_id}")
    if state.phase == Phase.FAILED and isinstance(state.outcome, CallFailure):
        return Banner(kind="error", text=f"Error creating event: {state.outcome.describe()}")
    return None


def _label(item: Any) -> str:
    if isinstance(item, dict):
        return str(item.get("name") or item.get("id") or item)
    return str(item)


def reference_summary(data: Any) -> Dict[str, List[str]]:
    summary = {}
    if not isinstance(data, dict):
        return summary
    for field, title in ENRICHED_FIELDS.items():
        items = data.get(field)
        if isinstance(items, list):
            summary[title] = [_label(i) for i in items]
    return summary
