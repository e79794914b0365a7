import asyncio

import pytest

from callables.schemas import CallFailure, CallSuccess, RecurringInput
from frontend.controller import CreateEventController, Phase, SubmissionInFlight

from conftest import EMPTY_REFS


class RecordingInvoker:
    def __init__(self, controller_ref, outcome=None, exc=None):
        self.controller_ref = controller_ref
        self.outcome = outcome
        self.exc = exc
        self.requests = []
        self.in_flight_during_call = []

    async def __call__(self, request):
        self.requests.append(request)
        self.in_flight_during_call.append(self.controller_ref[0].in_flight)
        if self.exc is not None:
            raise self.exc
        return self.outcome


def make_controller(outcome=None, exc=None):
    ref = []
    invoker = RecordingInvoker(ref, outcome=outcome, exc=exc)
    controller = CreateEventController(invoke=invoker, reference_ids=dict(EMPTY_REFS))
    ref.append(controller)
    return controller, invoker


def test_starts_idle():
    controller, _ = make_controller(CallSuccess())

    assert controller.state.phase == Phase.IDLE
    assert not controller.in_flight


@pytest.mark.parametrize("event_name, company_id", [("", "co123"), ("Launch Party", ""), ("  ", "  ")])
def test_validation_failure_never_invokes(event_name, company_id):
    controller, invoker = make_controller(CallSuccess())

    state = asyncio.run(controller.submit(event_name, company_id))

    assert invoker.requests == []
    assert state.phase == Phase.IDLE
    assert state.field_errors
    assert not controller.in_flight


def test_success_keeps_event_id_sent():
    controller, invoker = make_controller(CallSuccess(data={"tableLayouts": []}))

    state = asyncio.run(controller.submit("Launch Party", "co123"))

    assert state.phase == Phase.SUCCEEDED
    assert state.event_id == invoker.requests[0].event_id
    assert invoker.in_flight_during_call == [True]
    assert not controller.in_flight


def test_failure_returns_to_ready():
    controller, invoker = make_controller(CallFailure(status="NOT_FOUND", message="Company not found"))

    state = asyncio.run(controller.submit("Launch Party", "co123"))

    assert state.phase == Phase.FAILED
    assert state.outcome.message == "Company not found"
    assert invoker.in_flight_during_call == [True]
    assert not controller.in_flight


def test_invoker_exception_becomes_failure():
    controller, _ = make_controller(exc=RuntimeError("socket closed"))

    state = asyncio.run(controller.submit("Launch Party", "co123"))

    assert state.phase == Phase.FAILED
    assert state.outcome.status == "INTERNAL"
    assert "socket closed" in state.outcome.message
    assert not controller.in_flight


def test_resubmission_after_failure_uses_new_event_id():
    controller, invoker = make_controller(CallFailure(message="boom"))

    asyncio.run(controller.submit("Launch Party", "co123"))
    invoker.outcome = CallSuccess()
    state = asyncio.run(controller.submit("Launch Party", "co123"))

    assert state.phase == Phase.SUCCEEDED
    assert len(invoker.requests) == 2
    assert invoker.requests[0].event_id != invoker.requests[1].event_id


def test_reference_ids_flow_into_request():
    controller, invoker = make_controller(CallSuccess())
    controller.reference_ids["categories"] = ["vip", "regular"]

    asyncio.run(controller.submit("Launch Party", "co123"))

    assert invoker.requests[0].categories == ["vip", "regular"]
    assert invoker.requests[0].table_layouts == []


def test_recurring_and_guest_lists_reach_request():
    controller, invoker = make_controller(CallSuccess())
    recurring = RecurringInput(
        is_recurring=True,
        recurring_start_date="2026-02-01",
        recurring_end_date="2026-03-01",
        days_of_week=[5],
    )

    asyncio.run(
        controller.submit("Friday Club", "co123", recurring=recurring, additional_guest_lists=["VIP"])
    )

    assert invoker.requests[0].recurring == recurring
    assert invoker.requests[0].additional_guest_lists == ["VIP"]


def test_cancelled_submit_returns_to_ready():
    calls = []

    async def scenario():
        async def slow_invoke(request):
            calls.append(request)
            await asyncio.sleep(3600)
            return CallSuccess()

        controller = CreateEventController(invoke=slow_invoke, reference_ids=dict(EMPTY_REFS))
        task = asyncio.create_task(controller.submit("Launch Party", "co123"))
        await asyncio.sleep(0)
        assert controller.in_flight

        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        return controller

    controller = asyncio.run(scenario())

    assert not controller.in_flight
    assert controller.state.phase == Phase.FAILED
    assert controller.state.outcome.status == "INTERNAL"

    controller._invoke = _succeed
    state = asyncio.run(controller.submit("Launch Party", "co123"))
    assert state.phase == Phase.SUCCEEDED
    assert len(calls) == 1


async def _succeed(request):
    return CallSuccess()


def test_second_submit_rejected_while_in_flight():
    calls = []

    async def scenario():
        release = asyncio.Event()

        async def slow_invoke(request):
            calls.append(request)
            await release.wait()
            return CallSuccess()

        controller = CreateEventController(invoke=slow_invoke, reference_ids=dict(EMPTY_REFS))
        first = asyncio.create_task(controller.submit("Launch Party", "co123"))
        await asyncio.sleep(0)
        assert controller.in_flight

        with pytest.raises(SubmissionInFlight):
            await controller.submit("Launch Party", "co123")

        release.set()
        state = await first
        return controller, state

    controller, state = asyncio.run(scenario())

    assert len(calls) == 1
    assert state.phase == Phase.SUCCEEDED
    assert not controller.in_flight
