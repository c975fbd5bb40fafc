"""
Error hierarchy for claim assembly, signing, verification and key loading.
Every error carries a fixed message; optional detail is appended after a colon.
Underlying causes are chained with `raise ... from err` so callers can match on them.
"""


class ClaimsError(Exception):
    """Base exception for jwt_claims."""

    message = "jwt claims error"

    def __init__(self, detail: str | None = None):
        self.detail = detail
        super().__init__(self.format_message(detail))

    def format_message(self, detail: str | None) -> str:
        return f"{self.message}: {detail}" if detail else self.message


class InvalidClaimTypeError(ClaimsError):
    """A claim accessor was used against a claim of the wrong type."""

    message = "invalid claim type"


class InvalidTypeForClaimError(ClaimsError):
    """A registered claim was supplied with a type it cannot hold."""

    message = "invalid type for registered claim"

    def __init__(self, field: str):
        self.field = field
        super().__init__(field)

    def format_message(self, detail: str | None) -> str:
        return f"{self.message} for {detail}"


class UnsupportedClaimTypeError(ClaimsError):
    """The claim type is displayable but cannot be signed."""

    message = "unsupported claim type"

    def __init__(self, claim_type, key: str | None = None):
        self.claim_type = claim_type
        self.key = key
        super().__init__(f"{claim_type.name} ({key})" if key else claim_type.name)


class ClaimFormatInvalidError(ClaimsError):
    """The claim type does not match the runtime type of its value."""

    message = "claim format is invalid"


class IssuerOverrideError(ClaimsError):
    message = "issuer claim overrides configured issuer"


class AlgorithmError(ClaimsError):
    """Signing algorithm is not one of the RSA algorithms in use."""

    def __init__(self, algorithm: str):
        self.algorithm = algorithm
        super().__init__(algorithm)

    def format_message(self, detail: str | None) -> str:
        return f'jwt: algorithm "{detail}" not in use'


class EncodeError(ClaimsError):
    message = "unable to encode token"


class DecodeError(ClaimsError):
    message = "unable to decode token"


class MalformedClaimsError(ClaimsError):
    message = "malformed registered claim"


class SigningError(ClaimsError):
    message = "unable to sign claims"


class KeyLoadError(ClaimsError):
    """Key file could not be read or decoded. message names the failed step."""

    message = "unable to load key material"

    def __init__(self, message: str | None = None, detail: str | None = None):
        if message:
            self.message = message
        super().__init__(detail)


class ExtractPublicKeyError(KeyLoadError):
    message = "unable to extract public key"

    def __init__(self, detail: str | None = None):
        super().__init__(None, detail)


class VerificationError(ClaimsError):
    """
    Base for failures raised by a verifier.
    `result` is always the zero-valued VerifyResult; nothing from the token is exposed.
    """

    message = "token verification failed"

    def __init__(self, detail: str | None = None, result=None):
        self.result = result
        super().__init__(detail)


class TokenCheckError(VerificationError):
    message = "jwt failed check"


class InvalidAudienceError(VerificationError):
    message = "invalid token audience"


class TokenTimeNotValidError(VerificationError):
    message = "token time is not valid"
