"""
Token endpoint (POST /token). Issues an RSA-signed access token for a subject and audience list.
Lab/dev only; do not expose in production. The caller is not authenticated, so any
client that reaches the endpoint gets a token for any subject.
"""
import logging
from datetime import datetime, timedelta, timezone

from fastapi import APIRouter, Form, HTTPException

from jwt_claims.claims import (
    AUDIENCE,
    EXPIRES,
    FINGERPRINT,
    ISSUED,
    NOT_BEFORE,
    ONLINE,
    SUBJECT,
    bool_claim,
    string_claim,
    strings_claim,
    time_claim,
)
from jwt_claims.errors import SigningError
from token_service.config import AUDIENCES, TOKEN_TTL_SECONDS
from token_service.keys import get_signer

logger = logging.getLogger(__name__)
router = APIRouter()


def _issue_token(subject: str, audiences: list[str], online: bool, fingerprint: str | None) -> str:
    """Sign sub/aud/onl/iat/nbf/exp (and fpt when given); jti and iss are added by the signer."""
    now = datetime.now(timezone.utc)
    claims = [
        string_claim(SUBJECT, subject),
        strings_claim(AUDIENCE, audiences),
        bool_claim(ONLINE, online),
        time_claim(ISSUED, now),
        time_claim(NOT_BEFORE, now),
        time_claim(EXPIRES, now + timedelta(seconds=TOKEN_TTL_SECONDS)),
    ]
    if fingerprint:
        claims.append(string_claim(FINGERPRINT, fingerprint))
    return get_signer().sign_claims(*claims).decode("ascii")


@router.post("/token")
def token(
    subject: str = Form(...),
    audience: list[str] = Form([]),
    online: bool = Form(False),
    fingerprint: str | None = Form(None),
):
    """
    Issue an access token. audience may be repeated; without it the configured audiences are used.
    """
    if not subject.strip():
        raise HTTPException(
            status_code=400,
            detail={"error": "invalid_request", "error_description": "subject is required"},
        )
    audiences = [aud for aud in audience if aud] or AUDIENCES
    try:
        access_token = _issue_token(subject, audiences, online, fingerprint)
    except SigningError as e:
        logger.error("Token signing failed for sub=%s: %s", subject, e)
        raise HTTPException(status_code=500, detail={"error": "server_error"})
    logger.info("Issued token sub=%s aud=%s online=%s", subject, audiences, online)
    return {
        "access_token": access_token,
        "token_type": "Bearer",
        "expires_in": TOKEN_TTL_SECONDS,
    }
