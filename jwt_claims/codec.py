"""
Compact serialization and RSA signatures, delegated to PyJWT.
Only RSASSA-PKCS1-v1_5 (RS256/RS384/RS512) is in use. Audience and time checks are
left to the verifier, so PyJWT's own claim validation is switched off on decode.
"""
import jwt

from jwt_claims.claimset import ClaimSet
from jwt_claims.errors import AlgorithmError, DecodeError, EncodeError, MalformedClaimsError

# RSASSA-PKCS1-v1_5 with SHA-256
RS256 = "RS256"
# RSASSA-PKCS1-v1_5 with SHA-384
RS384 = "RS384"
# RSASSA-PKCS1-v1_5 with SHA-512
RS512 = "RS512"

RSA_ALGORITHMS = (RS256, RS384, RS512)

_DECODE_OPTIONS = {
    "verify_signature": True,
    "verify_aud": False,
    "verify_iss": False,
    "verify_exp": False,
    "verify_nbf": False,
    "verify_iat": False,
}


def rsa_sign(claim_set: ClaimSet, algorithm: str, private_key, *, scalar_audience: bool = False) -> bytes:
    """Serialize and sign claim_set. Returns the compact token as ASCII bytes."""
    if algorithm not in RSA_ALGORITHMS:
        raise AlgorithmError(algorithm)
    try:
        token = jwt.encode(
            claim_set.to_payload(scalar_audience=scalar_audience),
            private_key,
            algorithm=algorithm,
            headers={"typ": "JWT"},
        )
    except (jwt.PyJWTError, TypeError, ValueError) as e:
        raise EncodeError(str(e)) from e
    if isinstance(token, str):
        token = token.encode("ascii")
    return token


def rsa_check(token: bytes | str, public_key) -> ClaimSet:
    """Check the signature of token against public_key and return its claim set."""
    try:
        payload = jwt.decode(
            token,
            public_key,
            algorithms=list(RSA_ALGORITHMS),
            options=_DECODE_OPTIONS,
        )
    except (jwt.PyJWTError, TypeError, ValueError) as e:
        raise DecodeError(str(e)) from e
    try:
        return ClaimSet.from_payload(payload)
    except MalformedClaimsError as e:
        raise DecodeError(str(e)) from e
