"""Select and execute exactly one proof-of-identity mechanism per request.

Priority is fixed: a one-time exchange code beats a verification token, which
beats an already established session. Only the selected mechanism is tried;
when it fails the failure is reported as-is, lower-priority material is never
consulted. The resolver does not log, callers classify the outcome.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from core.auth.constants import DEFAULT_VERIFICATION_TOKEN_KIND, ProofMethod
from services.auth.errors import InvalidProofMaterial, NoProofSupplied
from services.auth.provider import IdentityProvider, IdentityProviderError, Principal


@dataclass(frozen=True)
class ExchangeCodeProof:
    code: str
    method: ProofMethod = "code"


@dataclass(frozen=True)
class VerificationTokenProof:
    token: str
    kind: Optional[str]
    method: ProofMethod = "token"


@dataclass(frozen=True)
class SessionProof:
    method: ProofMethod = "session"


ProofMaterial = Union[ExchangeCodeProof, VerificationTokenProof, SessionProof]


@dataclass(frozen=True)
class CredentialChangeRequest:
    new_secret: str
    exchange_code: Optional[str] = None
    token: Optional[str] = None
    token_kind: Optional[str] = None
    current_secret: Optional[str] = None

    def __repr__(self) -> str:
        # Secrets and proof values stay out of tracebacks and log lines.
        present = [name for name in ("exchange_code", "token", "current_secret") if getattr(self, name)]
        return f"CredentialChangeRequest(token_kind={self.token_kind!r}, present={present})"

    @property
    def is_direct_change(self) -> bool:
        return self.current_secret is not None

    @property
    def sensitive_values(self) -> tuple[Optional[str], ...]:
        return (self.new_secret, self.exchange_code, self.token, self.current_secret)


@dataclass(frozen=True)
class ProofOutcome:
    method: ProofMethod
    principal: Optional[Principal] = None
    failure: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.principal is not None and self.failure is None


def select_proof(request: CredentialChangeRequest) -> ProofMaterial:
    """Pick the single honored proof; other artifacts on the request are ignored."""
    if request.exchange_code:
        return ExchangeCodeProof(code=request.exchange_code)
    if request.token:
        return VerificationTokenProof(token=request.token, kind=request.token_kind)
    return SessionProof()


class AuthMethodResolver:
    def __init__(self, provider: IdentityProvider, *, token_kind: str = DEFAULT_VERIFICATION_TOKEN_KIND) -> None:
        self.provider = provider
        self.token_kind = token_kind

    async def resolve(self, request: CredentialChangeRequest) -> ProofOutcome:
        proof = select_proof(request)
        if isinstance(proof, ExchangeCodeProof):
            return await self._exchange_code(proof)
        if isinstance(proof, VerificationTokenProof):
            return await self._verify_token(proof)
        return await self._current_session()

    async def _exchange_code(self, proof: ExchangeCodeProof) -> ProofOutcome:
        try:
            principal = await self.provider.exchange_code(proof.code)
        except IdentityProviderError as exc:
            return ProofOutcome(method=proof.method, failure=exc)
        return ProofOutcome(method=proof.method, principal=principal)

    async def _verify_token(self, proof: VerificationTokenProof) -> ProofOutcome:
        if proof.kind != self.token_kind:
            return ProofOutcome(
                method=proof.method,
                failure=InvalidProofMaterial(f"unsupported token kind {proof.kind!r}"),
            )
        try:
            principal = await self.provider.verify_token(proof.token, proof.kind)
        except IdentityProviderError as exc:
            return ProofOutcome(method=proof.method, failure=exc)
        return ProofOutcome(method=proof.method, principal=principal)

    async def _current_session(self) -> ProofOutcome:
        try:
            principal = await self.provider.current_session()
        except IdentityProviderError as exc:
            return ProofOutcome(method="session", failure=exc)
        if principal is None:
            return ProofOutcome(method="session", failure=NoProofSupplied("no authentication material supplied"))
        return ProofOutcome(method="session", principal=principal)


__all__ = [
    "AuthMethodResolver",
    "CredentialChangeRequest",
    "ExchangeCodeProof",
    "ProofMaterial",
    "ProofOutcome",
    "SessionProof",
    "VerificationTokenProof",
    "select_proof",
]
