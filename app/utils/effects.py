from dataclasses import dataclass
from datetime import datetime, timezone
from enum import StrEnum
from typing import Awaitable, List, Optional, Type, TypeVar

from app.core.errors import SupplierWorkflowError
from app.core.logger import logger

T = TypeVar("T")


class ExternalSystem(StrEnum):
    IDENTITY = "identity"
    STORAGE = "storage"
    DOCUMENT = "document"


class EffectStatus(StrEnum):
    APPLIED = "applied"
    FAILED = "failed"


@dataclass(slots=True)
class Effect:
    """One external call of a workflow run and its outcome."""
    step: str
    system: ExternalSystem
    target: str
    status: EffectStatus
    at: datetime
    error: Optional[str] = None

    def describe(self) -> str:
        return f"{self.step} {self.system.value}:{self.target} ({self.status.value})"


class EffectLedger:
    """
    Ordered record of the irreversible side effects of one workflow run.

    The three external systems share no transaction, so a step that fails
    after others succeeded leaves their effects behind. The ledger runs each
    step, records it, and on failure raises the step's error carrying the
    effects already applied. Nothing is compensated.
    """

    def __init__(self, operation: str, subject: Optional[str] = None) -> None:
        self.operation = operation
        self.subject = subject
        self.effects: List[Effect] = []

    @property
    def applied(self) -> List[Effect]:
        return [e for e in self.effects if e.status is EffectStatus.APPLIED]

    async def step(
        self,
        name: str,
        call: Awaitable[T],
        *,
        system: ExternalSystem,
        target: str,
        error: Type[SupplierWorkflowError],
        message: Optional[str] = None,
    ) -> T:
        """
        Await ``call`` as step ``name`` against ``system``.

        Args:
            name: Step name, e.g. ``create_identity``.
            call: The provider coroutine to await.
            system: External system the call mutates.
            target: Identifier touched by the call (uid, blob path, phone).
            error: Workflow error raised if the call fails.
            message: Optional public message overriding the error default.

        Returns:
            Whatever the provider call returned.

        Raises:
            SupplierWorkflowError: ``error`` with the provider message as
                details and the previously applied effects attached.
        """
        try:
            result = await call
        except Exception as e:
            orphans = self.applied
            self.effects.append(
                Effect(name, system, target, EffectStatus.FAILED, _now(), error=str(e))
            )
            logger.error(
                "[EffectLedger] %s(%s) step %s failed on %s:%s: %s; applied before=%s",
                self.operation,
                self.subject,
                name,
                system.value,
                target,
                e,
                [o.describe() for o in orphans],
                exc_info=True,
            )
            raise error(message, details=str(e), effects=orphans) from e

        self.effects.append(Effect(name, system, target, EffectStatus.APPLIED, _now()))
        logger.info(
            "[EffectLedger] %s(%s) step %s applied on %s:%s",
            self.operation,
            self.subject,
            name,
            system.value,
            target,
        )
        return result


def _now() -> datetime:
    return datetime.now(timezone.utc)
