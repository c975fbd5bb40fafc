"""
RSA token verification.
Stages run in order and stop at the first failure: signature check, audience check,
time window check, then materialization of the VerifyResult. Failures raise a
VerificationError subclass whose `result` is the zero-valued VerifyResult.
"""
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from types import MappingProxyType

from cryptography.hazmat.primitives.asymmetric import rsa

from jwt_claims.audiences import Audiences
from jwt_claims.claims import (
    AUDIENCE,
    EXPIRES,
    FINGERPRINT,
    ID,
    ISSUED,
    ISSUER,
    NOT_BEFORE,
    ONLINE,
    SUBJECT,
    Claim,
    any_claim,
    string_claim,
    strings_claim,
    time_claim,
)
from jwt_claims.claimset import ClaimSet
from jwt_claims.codec import rsa_check
from jwt_claims.errors import (
    DecodeError,
    InvalidAudienceError,
    TokenCheckError,
    TokenTimeNotValidError,
)
from jwt_claims.x509 import parse_pkcs1_public_key_from_file

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VerifyResult:
    """
    Outcome of a successful verification. The default instance is the zero value.
    `audience` holds the accepted audiences, `claim_audiences` the token's own list.
    `not_before`/`expires` are None when the token does not carry them.
    """

    id: str = ""
    is_online: bool = False
    subject: str = ""
    audience: Audiences = field(default_factory=Audiences)
    claim_audiences: Audiences = field(default_factory=Audiences)
    fingerprint: str = ""
    not_before: datetime | None = None
    expires: datetime | None = None
    claims: Mapping[str, Claim] = field(default_factory=lambda: MappingProxyType({}))


def _time_window_error(claim_set: ClaimSet, now: datetime) -> str | None:
    if claim_set.not_before is not None and now < claim_set.not_before:
        return f"not valid before {claim_set.not_before.isoformat()}"
    if claim_set.expires is not None and now >= claim_set.expires:
        return f"expired at {claim_set.expires.isoformat()}"
    return None


def _claim_map(claim_set: ClaimSet) -> dict[str, Claim]:
    claims: dict[str, Claim] = {}
    if claim_set.issuer:
        claims[ISSUER] = string_claim(ISSUER, claim_set.issuer)
    if claim_set.subject:
        claims[SUBJECT] = string_claim(SUBJECT, claim_set.subject)
    if claim_set.audiences:
        claims[AUDIENCE] = strings_claim(AUDIENCE, claim_set.audiences)
    for name, value in (
        (NOT_BEFORE, claim_set.not_before),
        (EXPIRES, claim_set.expires),
        (ISSUED, claim_set.issued),
    ):
        if value is not None:
            claims[name] = time_claim(name, value)
    if claim_set.id:
        claims[ID] = string_claim(ID, claim_set.id)
    for key, value in claim_set.extra.items():
        claims[key] = any_claim(key, value)
    return claims


@dataclass(frozen=True)
class RSAVerifier:
    """
    Verifies tokens signed with the RSA key matching public_key and addressed to
    at least one of audiences. Immutable; safe to share between threads.
    """

    public_key: rsa.RSAPublicKey
    audiences: Audiences = field(default_factory=Audiences)

    def __post_init__(self):
        object.__setattr__(self, "audiences", Audiences(self.audiences))

    def verify(self, token: bytes | str) -> VerifyResult:
        check_time = datetime.now(timezone.utc)

        try:
            claim_set = rsa_check(token, self.public_key)
        except DecodeError as e:
            logger.debug("Token failed check: %s", e)
            raise TokenCheckError(str(e), result=VerifyResult()) from e

        if not claim_set.audiences.has_any(self.audiences):
            logger.debug("Token audiences %s do not match %s", claim_set.audiences.slice(), self.audiences.slice())
            raise InvalidAudienceError(result=VerifyResult())

        problem = _time_window_error(claim_set, check_time)
        if problem:
            logger.debug("Token time window check failed: %s", problem)
            raise TokenTimeNotValidError(problem, result=VerifyResult())

        online = claim_set.extra.get(ONLINE)
        fingerprint = claim_set.extra.get(FINGERPRINT)
        return VerifyResult(
            id=claim_set.id,
            is_online=online if isinstance(online, bool) else False,
            subject=claim_set.subject,
            audience=self.audiences.accepted(claim_set.audiences),
            claim_audiences=claim_set.audiences,
            fingerprint=fingerprint if isinstance(fingerprint, str) else "",
            not_before=claim_set.not_before,
            expires=claim_set.expires,
            claims=MappingProxyType(_claim_map(claim_set)),
        )


def new_rsa_verifier_from_file(audiences: Iterable[str], filename: str | Path) -> RSAVerifier:
    """Verifier for audiences using the RSA public key in the X.509 PEM certificate filename."""
    return RSAVerifier(public_key=parse_pkcs1_public_key_from_file(filename), audiences=Audiences(audiences))
