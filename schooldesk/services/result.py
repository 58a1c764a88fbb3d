"""Explicit service results.

Every public service method returns ``Success`` or ``Failure`` instead of
raising, so controllers only map results to envelopes.
"""

import functools
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Generic, TypeVar, Union

from pydantic import ValidationError as PayloadValidationError
from sqlalchemy.exc import SQLAlchemyError

from schooldesk.errors import NotFoundError, ServiceFailureError, StoreError, ValidationError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class FailureKind(str, Enum):
    """Classification of a failed service call."""

    NOT_FOUND = "not_found"
    INVALID = "invalid"
    STORE = "store"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class Success(Generic[T]):
    """Service call completed; ``value`` is its return value."""

    value: T
    ok: bool = True

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Failure:
    """Service call failed with a human-readable message."""

    message: str
    kind: FailureKind = FailureKind.UNKNOWN
    ok: bool = False

    def unwrap(self) -> Any:
        raise ServiceFailureError(self)


ServiceResult = Union[Success[T], Failure]


def service_call(action: str) -> Callable:
    """Wrap a service method so it returns ``Success``/``Failure``.

    ``action`` names the operation in messages, e.g. "creating class" gives
    "Error while creating class: <detail>".

    - NotFoundError / ValidationError become typed failures with their message
    - a Failure unwrapped by a nested call passes through unchanged
    - StoreError and SQLAlchemyError become STORE failures naming the action
    - anything else is logged with traceback and becomes a generic UNKNOWN failure
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                value = func(*args, **kwargs)
            except ServiceFailureError as e:
                return e.failure
            except NotFoundError as e:
                return Failure(str(e), FailureKind.NOT_FOUND)
            except (ValidationError, PayloadValidationError) as e:
                return Failure(f"Error while {action}: {e}", FailureKind.INVALID)
            except (StoreError, SQLAlchemyError) as e:
                detail = getattr(e, "orig", None) or e
                logger.error("Store failure while %s: %s", action, detail)
                return Failure(f"Error while {action}: {detail}", FailureKind.STORE)
            except Exception:
                logger.exception("Unexpected failure while %s", action)
                return Failure(f"Unknown error while {action}", FailureKind.UNKNOWN)
            if isinstance(value, (Success, Failure)):
                return value
            return Success(value)

        return wrapper

    return decorator


__all__ = ["FailureKind", "Success", "Failure", "ServiceResult", "service_call"]
