"""Uniform responses for endpoints that must not reveal whether an account exists."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Iterable, Optional

from services.auth.errors import classify, mask_email

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PublicResponse:
    status_code: int
    body: Dict[str, Any] = field(default_factory=dict)


class EnumerationSafeResponder:
    """Run the real attempt, log what happened, answer with one fixed response.

    The attempt callable keeps its own return value and exceptions so it can be
    tested directly; only the response leaving this adapter is uniform.
    """

    def __init__(self, operation: str, *, message: str, status_code: int = 200) -> None:
        self.operation = operation
        self.message = message
        self.status_code = status_code

    def response(self) -> PublicResponse:
        return PublicResponse(status_code=self.status_code, body={"success": True, "message": self.message})

    async def respond(
        self,
        attempt: Callable[[], Awaitable[Any]],
        *,
        identifier: Optional[str],
        sensitive: Iterable[Optional[str]] = (),
    ) -> PublicResponse:
        try:
            outcome = await attempt()
        except Exception as exc:  # every provider-side outcome collapses to the same answer
            classify(exc, operation=self.operation, identifier=identifier, stage="request", sensitive=sensitive)
        else:
            logger.info("[%s] completed for %s (%s)", self.operation, mask_email(identifier), _describe(outcome))
        return self.response()


def _describe(outcome: Any) -> str:
    if outcome is None:
        return "no session issued"
    return type(outcome).__name__


__all__ = ["EnumerationSafeResponder", "PublicResponse"]
