"""Credential reset / change state machine.

One pass per request, nothing persisted between steps::

    IDLE -> RESOLVING -> RESOLVED -> [VERIFYING ->] UPDATING -> UPDATED -> INVALIDATING -> DONE
                 \\-> REJECTED       \\-> REJECTED     \\-> REJECTED

VERIFYING only runs for the authenticated direct-change variant (the caller
supplied the current password). INVALIDATING always follows a successful
update; its failure is recorded on the result and logged, the caller still
sees success because the new credential is already in effect. A session
opened by VERIFYING is revoked alongside the proof session.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from services.auth.errors import AuthServiceError, FailureStage, classify, mask_email
from services.auth.provider import IdentityProvider, IdentityProviderError, Principal
from services.auth.resolver import AuthMethodResolver, CredentialChangeRequest, ProofOutcome

logger = logging.getLogger(__name__)


class OrchestratorState(str, Enum):
    IDLE = "idle"
    RESOLVING = "resolving"
    RESOLVED = "resolved"
    VERIFYING = "verifying"
    UPDATING = "updating"
    UPDATED = "updated"
    INVALIDATING = "invalidating"
    DONE = "done"
    REJECTED = "rejected"


@dataclass
class ResetResult:
    principal: Principal
    method: str
    states: List[OrchestratorState] = field(default_factory=list)
    invalidation_error: Optional[str] = None

    @property
    def session_invalidated(self) -> bool:
        return self.invalidation_error is None


class ResetOrchestrator:
    def __init__(self, provider: IdentityProvider, resolver: AuthMethodResolver, *, operation: str) -> None:
        self.provider = provider
        self.resolver = resolver
        self.operation = operation
        self.states: List[OrchestratorState] = [OrchestratorState.IDLE]

    @property
    def state(self) -> OrchestratorState:
        return self.states[-1]

    def _enter(self, state: OrchestratorState) -> None:
        self.states.append(state)

    def _reject(
        self,
        failure: BaseException,
        request: CredentialChangeRequest,
        *,
        stage: FailureStage,
        method: Optional[str],
        identifier: Optional[str],
    ) -> AuthServiceError:
        self._enter(OrchestratorState.REJECTED)
        error = classify(
            failure,
            operation=self.operation,
            identifier=identifier,
            stage=stage,
            method=method,  # type: ignore[arg-type]
            sensitive=request.sensitive_values,
        )
        return AuthServiceError(error)

    async def run(self, request: CredentialChangeRequest) -> ResetResult:
        if self.state is not OrchestratorState.IDLE:
            raise RuntimeError("ResetOrchestrator instances handle a single request")

        self._enter(OrchestratorState.RESOLVING)
        outcome: ProofOutcome = await self.resolver.resolve(request)
        if not outcome.ok:
            assert outcome.failure is not None
            raise self._reject(outcome.failure, request, stage="proof", method=outcome.method, identifier=None)
        principal = outcome.principal
        assert principal is not None
        self._enter(OrchestratorState.RESOLVED)

        reauthenticated: Optional[Principal] = None
        if request.is_direct_change:
            self._enter(OrchestratorState.VERIFYING)
            if not principal.email:
                missing = RuntimeError("session principal has no email address")
                raise self._reject(missing, request, stage="verify", method=outcome.method, identifier=None)
            try:
                reauthenticated = await self.provider.reauthenticate(principal.email, request.current_secret or "")
            except IdentityProviderError as exc:
                raise self._reject(exc, request, stage="verify", method=outcome.method, identifier=principal.email) from exc

        self._enter(OrchestratorState.UPDATING)
        try:
            await self.provider.set_credential(principal, request.new_secret)
        except IdentityProviderError as exc:
            raise self._reject(exc, request, stage="update", method=outcome.method, identifier=principal.email) from exc
        self._enter(OrchestratorState.UPDATED)

        invalidation_error = await self._invalidate(principal, reauthenticated)
        self._enter(OrchestratorState.DONE)
        logger.info(
            "[%s] credential updated for %s via %s (session invalidated=%s)",
            self.operation,
            mask_email(principal.email),
            outcome.method,
            invalidation_error is None,
        )
        return ResetResult(
            principal=principal,
            method=outcome.method,
            states=list(self.states),
            invalidation_error=invalidation_error,
        )

    async def _invalidate(self, principal: Principal, reauthenticated: Optional[Principal]) -> Optional[str]:
        self._enter(OrchestratorState.INVALIDATING)
        error = await self._revoke(principal)
        # Re-checking the current password opened a second provider session.
        extra_token = reauthenticated.access_token if reauthenticated is not None else None
        if reauthenticated is not None and extra_token and extra_token != principal.access_token:
            await self._revoke(reauthenticated)
        return error

    async def _revoke(self, principal: Principal) -> Optional[str]:
        try:
            await self.provider.invalidate_session(principal)
        except Exception as exc:  # the credential change already took effect
            logger.warning(
                "[%s] session invalidation failed for %s: %s",
                self.operation,
                mask_email(principal.email),
                type(exc).__name__,
            )
            return f"{type(exc).__name__}: {getattr(exc, 'code', None) or 'unknown'}"
        return None


__all__ = ["OrchestratorState", "ResetOrchestrator", "ResetResult"]
