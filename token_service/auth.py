"""
Bearer token verification for protected routes.
Runs the RSA verifier over the Authorization header; any failure is a 401.
"""
import logging
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from jwt_claims.errors import InvalidAudienceError, TokenTimeNotValidError, VerificationError
from jwt_claims.verifier import VerifyResult
from token_service.keys import get_verifier

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def _unauthorized(error: str, description: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={"error": error, "error_description": description},
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_bearer_token(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> str:
    """Extract Bearer token from Authorization header. Raises 401 if missing or not Bearer."""
    if credentials is None:
        raise _unauthorized("invalid_request", "Authorization header missing")
    if credentials.scheme.lower() != "bearer":
        raise _unauthorized("invalid_request", "Bearer scheme required")
    return credentials.credentials


def verify_access_token(token: str) -> VerifyResult:
    """Verify signature, audience and validity window. Raises HTTPException on invalid token."""
    try:
        return get_verifier().verify(token)
    except InvalidAudienceError:
        raise _unauthorized("invalid_token", "Invalid audience")
    except TokenTimeNotValidError:
        raise _unauthorized("invalid_token", "Token expired or not yet valid")
    except VerificationError as e:
        logger.debug("Token verification failed: %s", e)
        raise _unauthorized("invalid_token", "Token verification failed")


def get_verified(
    token: Annotated[str, Depends(get_bearer_token)],
) -> VerifyResult:
    """Dependency: valid Bearer token -> VerifyResult."""
    return verify_access_token(token)
