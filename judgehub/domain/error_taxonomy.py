from __future__ import annotations

from collections.abc import Mapping
from typing import Literal

# Canonical error vocabulary for every controller.
ErrorCode = Literal[
    "missing_fields",
    "invalid_data",
    "not_found",
    "ambiguous_target",
    "forbidden",
    "storage_unavailable",
    "upstream_unavailable",
    "internal_error",
]

EnvelopeKey = Literal["error", "message"]

CANONICAL_ERROR_CODES: tuple[ErrorCode, ...] = (
    "missing_fields",
    "invalid_data",
    "not_found",
    "ambiguous_target",
    "forbidden",
    "storage_unavailable",
    "upstream_unavailable",
    "internal_error",
)

# Status codes kept compatible with the existing web client, which expects
# 402 for missing fields and 404 for malformed payloads.
HTTP_STATUS_BY_CODE: Mapping[ErrorCode, int] = {
    "missing_fields": 402,
    "invalid_data": 404,
    "not_found": 404,
    "ambiguous_target": 409,
    "forbidden": 403,
    "storage_unavailable": 500,
    "upstream_unavailable": 500,
    "internal_error": 500,
}

# Not-found and third-party failures answer with "message", everything else with "error".
MESSAGE_ENVELOPE_CODES: frozenset[ErrorCode] = frozenset({"not_found", "upstream_unavailable"})

GENERIC_MESSAGES: Mapping[ErrorCode, str] = {
    "missing_fields": "Missing all required fields.",
    "invalid_data": "Invalid data received",
    "not_found": "No records found",
    "ambiguous_target": "Record id is required",
    "forbidden": "You are not authorized to perform this action",
    "storage_unavailable": "Error accessing records",
    "upstream_unavailable": "Upstream service is unavailable, please try again later.",
    "internal_error": "Internal server error",
}


def is_canonical_error_code(code: str) -> bool:
    return code in CANONICAL_ERROR_CODES


def resolve_error_code(code: str) -> ErrorCode:
    if is_canonical_error_code(code):
        return code  # type: ignore[return-value]
    # Keep responses stable even if a caller raised an unknown code.
    return "internal_error"


def http_status_for(code: str) -> int:
    return HTTP_STATUS_BY_CODE[resolve_error_code(code)]


def envelope_key_for(code: str) -> EnvelopeKey:
    if resolve_error_code(code) in MESSAGE_ENVELOPE_CODES:
        return "message"
    return "error"


def error_envelope(*, code: str, message: str | None = None) -> dict[str, str]:
    resolved = resolve_error_code(code)
    return {envelope_key_for(resolved): message or GENERIC_MESSAGES[resolved]}
