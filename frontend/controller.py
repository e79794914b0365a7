import logging
from datetime import datetime
from enum import Enum
from typing import Awaitable, Callable, Dict, List, Optional, Union

from pydantic import BaseModel, Field

from callables import client
from callables.schemas import CallFailure, CallResult, CallSuccess, EventCreationRequest, RecurringInput

from .composer import FieldValidationError, compose_request, load_reference_ids

logger = logging.getLogger(__name__)

Invoker = Callable[[EventCreationRequest], Awaitable[CallResult]]


class Phase(str, Enum):
    IDLE = "idle"
    IN_FLIGHT = "in_flight"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class ScreenState(BaseModel):
    phase: Phase = Phase.IDLE
    event_id: Optional[str] = None
    outcome: Optional[Union[CallSuccess, CallFailure]] = None
    field_errors: Dict[str, str] = Field(default_factory=dict)


class SubmissionInFlight(RuntimeError):
    pass


class CreateEventController:
    """Owns the create-event screen state.

    State only moves on submit, success or failure, and at most one
    createEvent call is outstanding per controller.
    """

    def __init__(
        self,
        invoke: Optional[Invoker] = None,
        reference_ids: Optional[Dict[str, List[str]]] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._invoke = invoke or client.create_event
        self.reference_ids = reference_ids if reference_ids is not None else load_reference_ids()
        self._clock = clock
        self.state = ScreenState()

    @property
    def in_flight(self) -> bool:
        return self.state.phase == Phase.IN_FLIGHT

    async def submit(
        self,
        event_name: str,
        company_id: str,
        *,
        additional_guest_lists: Optional[List[str]] = None,
        recurring: Optional[RecurringInput] = None,
    ) -> ScreenState:
        if self.in_flight:
            raise SubmissionInFlight(f"createEvent already in flight for {self.state.event_id}")

        refs = self.reference_ids
        try:
            request = compose_request(
                event_name,
                company_id,
                table_layouts=refs.get("tableLayouts", []),
                categories=refs.get("categories", []),
                club_card_ids=refs.get("clubCardIds", []),
                event_genre=refs.get("eventGenre", []),
                now=self._clock() if self._clock else None,
                additional_guest_lists=additional_guest_lists,
                recurring=recurring,
            )
        except FieldValidationError as e:
            logger.info("submission blocked by validation: %s", e.errors)
            self.state = ScreenState(field_errors=e.errors)
            return self.state

        self.state = ScreenState(phase=Phase.IN_FLIGHT, event_id=request.event_id)
        outcome = None
        try:
            outcome = await self._invoke(request)
        except Exception as e:
            logger.exception("createEvent invocation raised")
            outcome = CallFailure(status="INTERNAL", message=str(e) or e.__class__.__name__)
        finally:
            # cancellation and other BaseExceptions still leave IN_FLIGHT
            if outcome is None:
                logger.warning("createEvent for %s interrupted before completing", request.event_id)
                outcome = CallFailure(status="INTERNAL", message="Request was interrupted before it completed")
            phase = Phase.SUCCEEDED if isinstance(outcome, CallSuccess) else Phase.FAILED
            self.state = ScreenState(phase=phase, event_id=request.event_id, outcome=outcome)
        return self.state
