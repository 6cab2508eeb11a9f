# blueprints/availability/batch.py
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Generic, Iterable, List, Tuple, TypeVar

from pydantic import ValidationError

from .errors import AvailabilityError

log = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


@dataclass
class BatchFailure:
    index: int
    error: str
    data: Any


@dataclass
class BatchResult(Generic[R]):
    successes: List[R] = field(default_factory=list)
    failures: List[BatchFailure] = field(default_factory=list)

    @property
    def success_count(self) -> int:
        return len(self.successes)

    @property
    def failure_count(self) -> int:
        return len(self.failures)


def _validation_message(ve: ValidationError) -> str:
    parts = []
    for e in ve.errors():
        loc = ".".join(str(p) for p in e.get("loc", ()))
        parts.append(f"{loc}: {e['msg']}" if loc else e["msg"])
    return "; ".join(parts)


def apply_and_collect(pairs: Iterable[Tuple[int, T]], fn: Callable[[int, T], R]) -> BatchResult[R]:
    """Run fn over every (index, item); a failing item is recorded and the loop goes on.

    Only domain errors and payload validation errors count as item failures,
    anything else propagates to the caller.
    """
    result: BatchResult[R] = BatchResult()
    for index, item in pairs:
        try:
            result.successes.append(fn(index, item))
        except AvailabilityError as err:
            log.warning("batch item %d failed: %s", index, err.message)
            result.failures.append(BatchFailure(index=index, error=err.message, data=item))
        except ValidationError as ve:
            msg = _validation_message(ve)
            log.warning("batch item %d rejected: %s", index, msg)
            result.failures.append(BatchFailure(index=index, error=msg, data=item))
    return result
