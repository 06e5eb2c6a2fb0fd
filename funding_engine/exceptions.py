"""Custom exception hierarchy for funding-engine."""

from contextlib import contextmanager
from typing import Iterator


class FundingEngineError(Exception):
    """Base exception for all funding-engine errors."""


class DataAccessError(FundingEngineError):
    """Raised when the backing store cannot be read or written."""


class EntityNotFoundError(DataAccessError):
    """Raised when a referenced entity does not exist."""


class ReferentialIntegrityError(EntityNotFoundError):
    """Raised when a foreign key reference is violated."""


class InvalidTransitionError(FundingEngineError):
    """Raised when an operation is not allowed in the entity's current state."""


class PartialWriteError(FundingEngineError):
    """Raised when a multi-step write failed after some steps committed.

    The attached workflow records which steps completed and which one failed,
    so the operator can reconcile the ledger by hand.
    """

    def __init__(self, message: str, workflow) -> None:
        super().__init__(message)
        self.workflow = workflow

    @property
    def failed_step(self) -> str | None:
        step = self.workflow.failed_step
        return step.name if step is not None else None


class ConfigurationError(FundingEngineError):
    """Raised when configuration is invalid or missing."""


class SinkError(FundingEngineError):
    """Raised when a sink operation fails."""


@contextmanager
def store_access(action: str) -> Iterator[None]:
    """Re-raise unexpected store failures as ``DataAccessError``.

    Engine errors (missing entities, invalid transitions) pass through
    unchanged.
    """
    try:
        yield
    except FundingEngineError:
        raise
    except Exception as exc:
        raise DataAccessError(f"Failed to {action}: {exc}") from exc
