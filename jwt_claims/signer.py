"""
RSA token signers. The configured issuer is injected as the first claim, so a later
iss claim from the caller wins (logged, or rejected with strict_issuer=True).
DockerDistributionRSASigner emits a scalar aud for docker/distribution registries.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import ClassVar

from cryptography.hazmat.primitives.asymmetric import rsa

from jwt_claims.claims import (
    AUDIENCE,
    EXPIRES,
    ISSUER,
    NOT_BEFORE,
    ONLINE,
    SUBJECT,
    Claim,
    bool_claim,
    string_claim,
    strings_claim,
    time_claim,
)
from jwt_claims.claimset import construct_claim_set
from jwt_claims.codec import RS256, rsa_sign
from jwt_claims.errors import AlgorithmError, EncodeError, IssuerOverrideError, SigningError
from jwt_claims.x509 import parse_pkcs1_private_key_from_file

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RSASigner:
    """Signs claims with an RSA private key. Immutable; safe to share between threads."""

    private_key: rsa.RSAPrivateKey
    issuer: str = ""
    algorithm: str = RS256
    strict_issuer: bool = False

    scalar_audience: ClassVar[bool] = False

    def sign_claims(self, *claims: Claim) -> bytes:
        """Assemble claims (after the configured issuer) and return the signed token."""
        self._check_issuer_override(claims)
        claim_set = construct_claim_set(string_claim(ISSUER, self.issuer), *claims)
        try:
            return rsa_sign(claim_set, self.algorithm, self.private_key, scalar_audience=self.scalar_audience)
        except (AlgorithmError, EncodeError) as e:
            raise SigningError(str(e)) from e

    def _check_issuer_override(self, claims: tuple[Claim, ...]) -> None:
        if not self.issuer:
            return
        supplied = [c for c in claims if c.is_registered() and c.field() == ISSUER]
        # last write wins, so only the final iss matters
        if not supplied or supplied[-1].value == self.issuer:
            return
        if self.strict_issuer:
            raise IssuerOverrideError(self.issuer)
        logger.warning("Caller supplied iss claim overrides configured issuer %s", self.issuer)


@dataclass(frozen=True)
class DockerDistributionRSASigner(RSASigner):
    """
    Signer for docker/distribution registry tokens. The registry expects a single
    audience string, so only the first audience is emitted, as a scalar.
    """

    scalar_audience: ClassVar[bool] = True


def new_rsa_signer_from_file(filename: str | Path, issuer: str = "") -> RSASigner:
    """RS256 signer using the PKCS1 PEM private key in filename."""
    return RSASigner(private_key=parse_pkcs1_private_key_from_file(filename), issuer=issuer)


def new_docker_distribution_rsa_signer_from_file(
    filename: str | Path, issuer: str = ""
) -> DockerDistributionRSASigner:
    return DockerDistributionRSASigner(private_key=parse_pkcs1_private_key_from_file(filename), issuer=issuer)


def sign(
    signer: RSASigner,
    audience: list[str],
    subject: str,
    online: bool,
    not_before: datetime,
    expiry: datetime,
) -> bytes:
    """Sign the common subject/audience/online/validity claims in one call."""
    return signer.sign_claims(
        string_claim(SUBJECT, subject),
        strings_claim(AUDIENCE, audience),
        bool_claim(ONLINE, online),
        time_claim(NOT_BEFORE, not_before),
        time_claim(EXPIRES, expiry),
    )
