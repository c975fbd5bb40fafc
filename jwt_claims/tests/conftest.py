"""
Pytest fixtures for jwt_claims. RSA keys and a self-signed certificate are generated
once per session and written as PEM files, like the key.pem/cert.pem a service would load.
"""
from datetime import datetime, timedelta, timezone

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric.rsa import generate_private_key
from cryptography.x509.oid import NameOID

from jwt_claims.signer import new_rsa_signer_from_file
from jwt_claims.verifier import new_rsa_verifier_from_file

TEST_AUDIENCES = ["test-audience", "second-test-audience"]


def _pkcs1_pem(key) -> bytes:
    return key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.TraditionalOpenSSL,
        encryption_algorithm=serialization.NoEncryption(),
    )


def _certificate_pem(key) -> bytes:
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "jwt-claims-test")])
    now = datetime.now(timezone.utc)
    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - timedelta(days=1))
        .not_valid_after(now + timedelta(days=1))
        .sign(key, hashes.SHA256())
    )
    return cert.public_bytes(serialization.Encoding.PEM)


@pytest.fixture(scope="session")
def rsa_key():
    return generate_private_key(65537, 2048)


@pytest.fixture(scope="session")
def other_rsa_key():
    return generate_private_key(65537, 2048)


@pytest.fixture(scope="session")
def key_dir(tmp_path_factory, rsa_key):
    """Directory holding key.pem (PKCS1) and cert.pem (X.509) for rsa_key."""
    d = tmp_path_factory.mktemp("keys")
    (d / "key.pem").write_bytes(_pkcs1_pem(rsa_key))
    (d / "cert.pem").write_bytes(_certificate_pem(rsa_key))
    return d


@pytest.fixture
def signer(key_dir):
    return new_rsa_signer_from_file(key_dir / "key.pem")


@pytest.fixture
def verifier(key_dir):
    return new_rsa_verifier_from_file(TEST_AUDIENCES, key_dir / "cert.pem")
