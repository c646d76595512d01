from __future__ import annotations

from judgehub.domain.error_taxonomy import ErrorCode


class DomainError(Exception):
    code: ErrorCode = "internal_error"


class DomainValidationError(DomainError):
    code: ErrorCode = "missing_fields"


class InvalidDataError(DomainValidationError):
    code: ErrorCode = "invalid_data"


class RecordNotFoundError(DomainError):
    code: ErrorCode = "not_found"


class AmbiguousTargetError(DomainError):
    code: ErrorCode = "ambiguous_target"


class AuthorizationError(DomainError):
    code: ErrorCode = "forbidden"


class StorageUnavailableError(DomainError):
    code: ErrorCode = "storage_unavailable"


class DomainDependencyError(DomainError):
    code: ErrorCode = "upstream_unavailable"
