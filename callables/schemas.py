from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class RecurringInput(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    is_recurring: bool = Field(alias="isRecurring")
    recurring_start_date: Optional[str] = Field(default=None, alias="recurringStartDate")
    recurring_end_date: Optional[str] = Field(default=None, alias="recurringEndDate")
    # 0 = Sunday, 1 = Monday, ...
    days_of_week: Optional[List[int]] = Field(default=None, alias="daysOfWeek")


class EventCreationRequest(BaseModel):
    """Payload of the createEvent callable.

    Field names are snake_case in Python and camelCase on the wire; use
    ``to_payload()`` to get the JSON-ready dict.
    """

    model_config = ConfigDict(populate_by_name=True)

    event_id: str = Field(alias="eventId", min_length=1)
    event_name: str = Field(alias="eventName", min_length=1)
    start_date_time: str = Field(alias="startDateTime")
    end_date_time: str = Field(alias="endDateTime")
    company_id: str = Field(alias="companyId", min_length=1)

    table_layouts: List[str] = Field(default_factory=list, alias="tableLayouts")
    categories: List[str] = Field(default_factory=list, alias="categories")
    club_card_ids: List[str] = Field(default_factory=list, alias="clubCardIds")
    event_genre: List[str] = Field(default_factory=list, alias="eventGenre")

    additional_guest_lists: Optional[List[str]] = Field(default=None, alias="additionalGuestLists")
    recurring: Optional[RecurringInput] = None

    def to_payload(self) -> Dict[str, Any]:
        # optional extras are left out entirely, reference lists are always sent
        return self.model_dump(by_alias=True, exclude_none=True)


class CallSuccess(BaseModel):
    ok: Literal[True] = True
    # enrichment from the server, passed through untouched
    data: Any = None
    message: Optional[str] = None
    result: Dict[str, Any] = Field(default_factory=dict)


class CallFailure(BaseModel):
    ok: Literal[False] = False
    status: str = "INTERNAL"
    message: str
    details: Any = None
    http_status: Optional[int] = None

    def describe(self) -> str:
        if self.status:
            return f"[{self.status}] {self.message}"
        return self.message


CallResult = Union[CallSuccess, CallFailure]
