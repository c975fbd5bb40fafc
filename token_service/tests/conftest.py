"""
Pytest configuration for token_service. Keys are generated into a temp directory so tests
don't touch the working directory.
"""
import os
import tempfile

_KEY_DIR = tempfile.mkdtemp(prefix="token-service-test-")

os.environ["TOKEN_ISSUER"] = "http://token.test"
os.environ["TOKEN_AUDIENCES"] = "myservice,registry"
os.environ["TOKEN_PRIVATE_KEY_PATH"] = os.path.join(_KEY_DIR, "key.pem")
os.environ["TOKEN_CERTIFICATE_PATH"] = os.path.join(_KEY_DIR, "cert.pem")
os.environ["TOKEN_TTL_SECONDS"] = "600"
if "TOKEN_DOCKER_DISTRIBUTION" in os.environ:
    del os.environ["TOKEN_DOCKER_DISTRIBUTION"]
if "TOKEN_ALGORITHM" in os.environ:
    del os.environ["TOKEN_ALGORITHM"]
