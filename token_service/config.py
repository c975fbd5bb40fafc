"""
Token service configuration.
Issuer and audiences are public identifiers; key material lives in PEM files, never in code.
"""
import os

# Issuer written into every token (iss)
ISSUER = os.environ.get("TOKEN_ISSUER", "http://127.0.0.1:9100").rstrip("/")

# Audiences this service accepts on /me; also the default aud for issued tokens
AUDIENCES = [
    aud.strip() for aud in os.environ.get("TOKEN_AUDIENCES", "myservice").split(",") if aud.strip()
]

# RS256, RS384 or RS512
ALGORITHM = os.environ.get("TOKEN_ALGORITHM", "RS256")

# PKCS1 private key and X.509 certificate (PEM). Generated on first start if missing.
PRIVATE_KEY_PATH = os.environ.get("TOKEN_PRIVATE_KEY_PATH", "key.pem")
CERTIFICATE_PATH = os.environ.get("TOKEN_CERTIFICATE_PATH", "cert.pem")

# Lifetime of issued tokens (seconds)
TOKEN_TTL_SECONDS = int(os.environ.get("TOKEN_TTL_SECONDS", "3600"))

# Emit a scalar aud for docker/distribution registries
DOCKER_DISTRIBUTION = os.environ.get("TOKEN_DOCKER_DISTRIBUTION", "").strip().lower() in ("1", "true", "yes")
