"""Decode push-delivered clone job messages.

Push deliveries arrive as ``{"message": {"data": "<base64 JSON>"}}``. Decoding
never touches the datastore, so a rejected message leaves no trace beyond the
log line.
"""
import base64
import binascii
import json
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from liftlog.core.exceptions import DecodeError, ValidationError
from liftlog.schemas.clone_job import CloneJob


def _load_envelope(payload: bytes | str | dict) -> dict:
    if isinstance(payload, dict):
        return payload
    try:
        envelope = json.loads(payload)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise DecodeError("request body is not valid JSON", code="DEC_BODY") from e
    if not isinstance(envelope, dict):
        raise DecodeError("request body must be a JSON object", code="DEC_BODY")
    return envelope


def _extract_data(envelope: dict) -> str:
    message = envelope.get("message")
    if not isinstance(message, dict) or not message.get("data"):
        raise DecodeError("missing message", code="DEC_MISSING_MESSAGE")
    data = message["data"]
    if not isinstance(data, str):
        raise DecodeError("message.data must be a base64 string", code="DEC_DATA_TYPE")
    return data


_URLSAFE_TO_STANDARD = str.maketrans("-_", "+/")


def _b64decode_lenient(data: str) -> bytes:
    """Accept standard or URL-safe alphabets, missing padding and embedded whitespace."""
    compact = "".join(data.split()).translate(_URLSAFE_TO_STANDARD).rstrip("=")
    return base64.b64decode(compact + "=" * (-len(compact) % 4), validate=True)


def _decode_job_document(data: str) -> dict[str, Any]:
    try:
        raw = _b64decode_lenient(data)
    except (binascii.Error, ValueError) as e:
        raise DecodeError("invalid message payload: data is not base64", code="DEC_BASE64") from e
    try:
        document = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise DecodeError("invalid message payload", code="DEC_JSON") from e
    if not isinstance(document, dict):
        raise DecodeError("invalid message payload: job must be a JSON object", code="DEC_JSON")
    return document


def _to_domain_error(exc: PydanticValidationError) -> ValidationError:
    first = exc.errors()[0]
    field = ".".join(str(part) for part in first["loc"]) or "job"
    return ValidationError(
        field,
        f"missing or invalid job fields ({first['msg']})",
        {
            "field": field,
            "errors": [
                {"loc": [str(part) for part in err["loc"]], "msg": err["msg"]}
                for err in exc.errors()
            ],
        },
    )


def decode_push_payload(payload: bytes | str | dict) -> CloneJob:
    """Turn a raw push body into a validated CloneJob.

    Raises:
        DecodeError: envelope missing, data not base64, or payload not JSON
        ValidationError: required job fields missing or malformed
    """
    envelope = _load_envelope(payload)
    document = _decode_job_document(_extract_data(envelope))
    try:
        return CloneJob.model_validate(document)
    except PydanticValidationError as e:
        raise _to_domain_error(e) from e


def encode_push_payload(job: CloneJob) -> dict:
    """Build the push envelope for a job; the inverse of ``decode_push_payload``."""
    body = job.model_dump_json(by_alias=True, exclude_none=True)
    return {"message": {"data": base64.b64encode(body.encode("utf-8")).decode("ascii")}}
