import asyncio
import logging
import os
from typing import Any, Dict, Optional

import requests

from .auth import MissingCredentialError, get_id_token
from .schemas import CallFailure, CallResult, CallSuccess, EventCreationRequest

logger = logging.getLogger("callables.client")
if not logger.handlers:
    handler = logging.StreamHandler()
    formatter = logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)

CREATE_EVENT = "createEvent"

FIREBASE_PROJECT_ID = os.getenv("FIREBASE_PROJECT_ID", "guestbuddy-test-3b36d")
FUNCTIONS_REGION = os.getenv("FUNCTIONS_REGION", "us-central1")

try:
    CALLABLE_TIMEOUT = float(os.getenv("CALLABLE_TIMEOUT", "60"))
except Exception:
    CALLABLE_TIMEOUT = 60.0

# Callable error status for an HTTP code when the body carries none
STATUS_BY_HTTP_CODE = {
    400: "INVALID_ARGUMENT",
    401: "UNAUTHENTICATED",
    403: "PERMISSION_DENIED",
    404: "NOT_FOUND",
    409: "ALREADY_EXISTS",
    429: "RESOURCE_EXHAUSTED",
}


def functions_base_url() -> str:
    """Resolve where callables live: explicit URL, local emulator, or the deployed project."""
    base = os.getenv("FUNCTIONS_BASE_URL")
    if base:
        return base.rstrip("/")
    emulator = os.getenv("FUNCTIONS_EMULATOR_HOST")
    if emulator:
        return f"http://{emulator.rstrip('/')}/{FIREBASE_PROJECT_ID}/{FUNCTIONS_REGION}"
    return f"https://{FUNCTIONS_REGION}-{FIREBASE_PROJECT_ID}.cloudfunctions.net"


def _text(value: Any, default: str) -> str:
    if value is None or value == "":
        return default
    if isinstance(value, str):
        return value
    if isinstance(value, dict) and isinstance(value.get("message"), str) and value["message"]:
        return value["message"]
    return str(value)


def _failure_from_response(response: requests.Response) -> CallFailure:
    try:
        body = response.json()
    except ValueError:
        body = None

    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict):
        return CallFailure(
            status=_text(error.get("status"), STATUS_BY_HTTP_CODE.get(response.status_code, "INTERNAL")),
            message=_text(error.get("message"), response.reason or "Unknown error"),
            details=error.get("details", error),
            http_status=response.status_code,
        )

    return CallFailure(
        status=STATUS_BY_HTTP_CODE.get(response.status_code, "INTERNAL"),
        message=f"HTTP {response.status_code}: {response.text[:500] or response.reason}",
        http_status=response.status_code,
    )


def _parse_result(response: requests.Response) -> CallResult:
    try:
        body = response.json()
    except ValueError:
        return CallFailure(
            status="INTERNAL",
            message=f"Response is not valid JSON: {response.text[:200]}",
            http_status=response.status_code,
        )

    # older callable servers answer with "data" instead of "result"
    key = "result" if isinstance(body, dict) and "result" in body else "data"
    if not isinstance(body, dict) or key not in body:
        return CallFailure(
            status="INTERNAL",
            message="Response is missing the 'result' field",
            details=body,
            http_status=response.status_code,
        )

    result = body[key]
    if not isinstance(result, dict):
        return CallSuccess(data=result, result={"value": result})

    # createEvent reports its own validation and lookup errors inside a 200 result
    if result.get("success") is False:
        return CallFailure(
            status="FAILED_PRECONDITION",
            message=_text(result.get("error"), "Remote function reported failure"),
            details=result,
            http_status=response.status_code,
        )

    message = result.get("message")
    return CallSuccess(
        data=result.get("data"),
        message=None if message is None else _text(message, ""),
        result=result,
    )


def call_function(
    name: str,
    payload: Dict[str, Any],
    token: Optional[str] = None,
    timeout: Optional[float] = None,
) -> CallResult:
    """Invoke a callable once and return CallSuccess or CallFailure; never raises."""
    url = f"{functions_base_url()}/{name.lstrip('/')}"

    if token is None:
        try:
            token = get_id_token()
        except MissingCredentialError as e:
            logger.warning("call %s aborted: %s", name, e)
            return CallFailure(status="UNAUTHENTICATED", message=str(e))

    headers = {
        "Content-Type": "application/json",
        "Authorization": f"Bearer {token}",
    }

    logger.info("POST %s with payload: %s", url, payload)
    try:
        response = requests.post(
            url,
            json={"data": payload},
            headers=headers,
            timeout=timeout if timeout is not None else CALLABLE_TIMEOUT,
        )
    except requests.RequestException as e:
        logger.warning("call %s failed to reach %s: %s", name, url, e)
        return CallFailure(status="UNAVAILABLE", message=f"Failed to reach callable '{name}' at {url}: {e}")

    if not response.ok:
        failure = _failure_from_response(response)
        logger.warning("call %s returned %s: %s", name, response.status_code, failure.message)
        return failure

    outcome = _parse_result(response)
    if isinstance(outcome, CallFailure):
        logger.warning("call %s failed: %s", name, outcome.describe())
    else:
        logger.info("call %s succeeded: %s", name, outcome.message)
    return outcome


async def create_event(
    request: EventCreationRequest,
    token: Optional[str] = None,
    timeout: Optional[float] = None,
) -> CallResult:
    # requests is blocking; keep the event loop free while the call is outstanding
    return await asyncio.to_thread(call_function, CREATE_EVENT, request.to_payload(), token, timeout)
