import pytest

from judgehub.domain.error_taxonomy import (
    error_envelope,
    envelope_key_for,
    http_status_for,
    is_canonical_error_code,
    resolve_error_code,
)
from judgehub.domain.errors import (
    AmbiguousTargetError,
    AuthorizationError,
    DomainDependencyError,
    DomainValidationError,
    InvalidDataError,
    RecordNotFoundError,
    StorageUnavailableError,
)


@pytest.mark.unit
def test_canonical_error_codes_are_enforced() -> None:
    assert is_canonical_error_code("not_found") is True
    assert is_canonical_error_code("unknown_error") is False
    assert resolve_error_code("unknown_error") == "internal_error"


@pytest.mark.unit
@pytest.mark.parametrize(
    ("error", "status"),
    [
        (DomainValidationError(), 402),
        (InvalidDataError(), 404),
        (RecordNotFoundError(), 404),
        (AmbiguousTargetError(), 409),
        (AuthorizationError(), 403),
        (StorageUnavailableError(), 500),
        (DomainDependencyError(), 500),
    ],
)
def test_domain_errors_map_to_http_status(error: Exception, status: int) -> None:
    assert http_status_for(error.code) == status  # type: ignore[attr-defined]


@pytest.mark.unit
def test_envelope_key_depends_on_error_kind() -> None:
    assert envelope_key_for("not_found") == "message"
    assert envelope_key_for("upstream_unavailable") == "message"
    assert envelope_key_for("missing_fields") == "error"
    assert envelope_key_for("storage_unavailable") == "error"


@pytest.mark.unit
def test_error_envelope_falls_back_to_generic_message() -> None:
    assert error_envelope(code="missing_fields") == {"error": "Missing all required fields."}
    assert error_envelope(code="not_found", message="Competition not found") == {
        "message": "Competition not found"
    }
    assert error_envelope(code="bogus") == {"error": "Internal server error"}
