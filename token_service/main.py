"""
Token Service.
POST /token issues RSA-signed access tokens; GET /me verifies one and echoes its claims.
Port 9100 by default.
"""
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI

from jwt_claims.verifier import VerifyResult
from token_service.auth import get_verified
from token_service.keys import get_signer, get_verifier
from token_service.token_endpoint import router as token_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load or generate the key pair on startup."""
    get_signer()
    get_verifier()
    yield


app = FastAPI(title="Token Service", version="0.1.0", lifespan=lifespan)
app.include_router(token_router, tags=["token"])


@app.get("/health")
def health():
    """Health check endpoint."""
    return {"status": "ok", "service": "token_service"}


@app.get("/me")
def me(result: VerifyResult = Depends(get_verified)):
    """Requires a valid Bearer token. Returns the verified identity."""
    return {
        "sub": result.subject,
        "jti": result.id,
        "aud": result.audience.slice(),
        "online": result.is_online,
        "fingerprint": result.fingerprint,
        "nbf": result.not_before.isoformat() if result.not_before else None,
        "exp": result.expires.isoformat() if result.expires else None,
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "token_service.main:app",
        host="127.0.0.1",
        port=9100,
        reload=True,
    )
