from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
import logging

from judgehub.domain.contracts import ContestRepository, Judge, Translator
from judgehub.domain.errors import DomainError, StorageUnavailableError

logger = logging.getLogger("runtime")


@dataclass(frozen=True)
class ApiDeps:
    repository: ContestRepository
    judge: Judge
    translator: Translator
    require_competition_roles: bool = True


@contextmanager
def store_errors(message: str) -> Iterator[None]:
    """Converts store failures into a generic storage error at the controller boundary."""
    try:
        yield
    except DomainError:
        raise
    except Exception as exc:
        logger.exception("store operation failed", extra={"detail": message})
        raise StorageUnavailableError(message) from exc
