"""
RSA key pair for the token service: PKCS1 private key for signing, self-signed X.509
certificate for verification. Loaded from file, or generated and persisted on first use.
The signer and verifier built from them are shared process-wide (both are immutable).
"""
import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric.rsa import generate_private_key
from cryptography.x509.oid import NameOID

from jwt_claims.signer import DockerDistributionRSASigner, RSASigner
from jwt_claims.verifier import RSAVerifier
from jwt_claims.x509 import parse_pkcs1_private_key_from_file, parse_pkcs1_public_key_from_file

logger = logging.getLogger(__name__)

_KEY_BITS = 2048
_CERT_VALID_DAYS = 365


def _generate_key():
    return generate_private_key(65537, _KEY_BITS)


def _serialize_private(key) -> bytes:
    return key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.TraditionalOpenSSL,
        encryption_algorithm=serialization.NoEncryption(),
    )


def _self_signed_certificate(key, common_name: str) -> bytes:
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)])
    now = datetime.now(timezone.utc)
    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - timedelta(minutes=5))
        .not_valid_after(now + timedelta(days=_CERT_VALID_DAYS))
        .sign(key, hashes.SHA256())
    )
    return cert.public_bytes(serialization.Encoding.PEM)


def load_or_create_key_pair(key_path: str, cert_path: str, common_name: str = "token-service"):
    """
    Load (private_key, public_key) from key_path and cert_path, or generate both and save them.
    Existing files that fail to parse raise KeyLoadError rather than being replaced.
    """
    kp, cp = Path(key_path), Path(cert_path)
    if kp.exists() and cp.exists():
        return parse_pkcs1_private_key_from_file(kp), parse_pkcs1_public_key_from_file(cp)

    key = _generate_key()
    try:
        kp.write_bytes(_serialize_private(key))
        cp.write_bytes(_self_signed_certificate(key, common_name))
        logger.info("Generated and saved signing key to %s and certificate to %s", key_path, cert_path)
    except OSError as e:
        logger.warning("Could not save key pair to %s, %s: %s", key_path, cert_path, e)
    return key, key.public_key()


# Module-level state (set on first use or at app startup)
_signer: RSASigner | None = None
_verifier: RSAVerifier | None = None


def _ensure_keys_loaded():
    global _signer, _verifier
    if _signer is not None:
        return
    from token_service.config import (
        ALGORITHM,
        AUDIENCES,
        CERTIFICATE_PATH,
        DOCKER_DISTRIBUTION,
        ISSUER,
        PRIVATE_KEY_PATH,
    )

    private_key, public_key = load_or_create_key_pair(PRIVATE_KEY_PATH, CERTIFICATE_PATH)
    signer_cls = DockerDistributionRSASigner if DOCKER_DISTRIBUTION else RSASigner
    _verifier = RSAVerifier(public_key=public_key, audiences=AUDIENCES)
    _signer = signer_cls(private_key=private_key, issuer=ISSUER, algorithm=ALGORITHM)


def get_signer() -> RSASigner:
    _ensure_keys_loaded()
    return _signer


def get_verifier() -> RSAVerifier:
    _ensure_keys_loaded()
    return _verifier
