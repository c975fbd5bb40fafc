"""
RSA key material from PEM files: a PKCS1 private key for signing and an X.509
certificate carrying the RSA public key for verification.
"""
from pathlib import Path

from cryptography import x509
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from jwt_claims.errors import ExtractPublicKeyError, KeyLoadError

_PARSE_ERRORS = (ValueError, TypeError, UnsupportedAlgorithm)


def _as_bytes(data: bytes | str) -> bytes:
    return data.encode("ascii") if isinstance(data, str) else data


def parse_pkcs1_private_key(data: bytes | str) -> rsa.RSAPrivateKey:
    """Parse an unencrypted RSA private key from PEM data."""
    try:
        key = serialization.load_pem_private_key(_as_bytes(data), password=None)
    except _PARSE_ERRORS as e:
        raise KeyLoadError("unable to parse private key", str(e)) from e
    if not isinstance(key, rsa.RSAPrivateKey):
        raise KeyLoadError("unable to parse private key", f"{type(key).__name__} is not an RSA key")
    return key


def parse_pkcs1_private_key_from_file(filename: str | Path) -> rsa.RSAPrivateKey:
    try:
        data = Path(filename).read_bytes()
    except OSError as e:
        raise KeyLoadError("unable to read private key", str(e)) from e
    return parse_pkcs1_private_key(data)


def parse_pkcs1_public_key(data: bytes | str) -> rsa.RSAPublicKey:
    """Parse a PEM X.509 certificate and return its RSA public key."""
    try:
        cert = x509.load_pem_x509_certificate(_as_bytes(data))
        public_key = cert.public_key()
    except _PARSE_ERRORS as e:
        raise KeyLoadError("unable to parse certificate", str(e)) from e
    if not isinstance(public_key, rsa.RSAPublicKey):
        raise ExtractPublicKeyError(f"{type(public_key).__name__} is not an RSA key")
    return public_key


def parse_pkcs1_public_key_from_file(filename: str | Path) -> rsa.RSAPublicKey:
    try:
        data = Path(filename).read_bytes()
    except OSError as e:
        raise KeyLoadError("unable to read certificate", str(e)) from e
    return parse_pkcs1_public_key(data)
