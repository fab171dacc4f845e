"""Error taxonomy shared by every CareerBridge service.

Each error carries the severity it should be logged at and a message that
is safe to show an end user. Caller mistakes (``NotFound``, ``InvalidInput``)
are low severity and echo their own message; external dependency trouble
is logged loudly and surfaced as a generic "try again".
"""

from __future__ import annotations

import logging
from typing import TypeVar

GENERIC_RETRY_MESSAGE = (
    "Something went wrong talking to an external service. Please try again."
)


class CareerBridgeError(Exception):
    """Base class for all errors raised by the core."""

    log_level: int = logging.ERROR
    user_message: str = GENERIC_RETRY_MESSAGE

    def __init__(self, message: str, original_error: Exception | None = None):
        super().__init__(message)
        self.original_error = original_error

    @property
    def public_message(self) -> str:
        """Message that may be shown to the end user."""
        return self.user_message


class NotFound(CareerBridgeError):
    """Record does not exist, or exists but is owned by someone else."""

    log_level = logging.INFO

    @property
    def public_message(self) -> str:
        return str(self)


class InvalidInput(CareerBridgeError):
    """Malformed filters, out-of-range values or empty structural fields."""

    log_level = logging.INFO

    @property
    def public_message(self) -> str:
        return str(self)


class MalformedAiResponse(CareerBridgeError):
    """The AI provider returned content that could not be used."""

    log_level = logging.WARNING

    def __init__(
        self,
        message: str,
        raw_response: str | None = None,
        original_error: Exception | None = None,
    ):
        super().__init__(message, original_error)
        self.raw_response = raw_response


class UpstreamUnavailable(CareerBridgeError):
    """Provider or storage call failed transiently; safe for the caller to retry."""

    log_level = logging.ERROR


class PersistenceConflict(CareerBridgeError):
    """A uniqueness constraint was violated outside the normal upsert flow."""

    log_level = logging.ERROR


E = TypeVar("E", bound=CareerBridgeError)


def logged(logger: logging.Logger, error: E) -> E:
    """Log ``error`` at the severity its kind calls for and return it.

    Usage: ``raise logged(logger, NotFound("..."))``.
    """
    logger.log(error.log_level, "%s: %s", type(error).__name__, error)
    return error
