from typing import Optional

from athletehub.utils.serialize import clean


def success(message: Optional[str] = None, **data) -> dict:
    """Body for a successful response: {status, message?, data?}."""
    body = {"status": "success"}
    if message:
        body["message"] = message
    if data:
        body["data"] = clean(data)
    return body


def failure_status(status_code: int) -> str:
    # client mistakes are "fail"; auth problems and server faults are "error"
    if status_code == 401 or status_code >= 500:
        return "error"
    return "fail"
