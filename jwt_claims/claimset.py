"""
Claim set aggregate: registered fields plus an extension mapping.
construct_claim_set folds an ordered sequence of Claims into a ClaimSet ready for
signing (last write wins, a random jti is synthesized when none is given).
ClaimSet.from_payload is the inverse applied to a decoded token payload.
"""
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any

from jwt_claims.audiences import Audiences
from jwt_claims.claims import (
    AUDIENCE,
    EPOCH,
    EXPIRES,
    ID,
    INTEGER_TYPES,
    ISSUED,
    ISSUER,
    NOT_BEFORE,
    SIGNABLE_TYPES,
    SUBJECT,
    TIME_FIELDS,
    Claim,
    ClaimType,
    ResourceActions,
    is_string_sequence,
)
from jwt_claims.errors import (
    ClaimFormatInvalidError,
    InvalidTypeForClaimError,
    MalformedClaimsError,
    UnsupportedClaimTypeError,
)

# registered claim code -> ClaimSet attribute
_FIELD_ATTRS = {
    ISSUER: "issuer",
    SUBJECT: "subject",
    AUDIENCE: "audiences",
    EXPIRES: "expires",
    NOT_BEFORE: "not_before",
    ISSUED: "issued",
    ID: "id",
}


def to_numeric_time(val: datetime) -> float:
    """Seconds since the Unix epoch, with sub-second precision."""
    return (val - EPOCH) / timedelta(seconds=1)


_MAX_TIME = datetime.max.replace(tzinfo=timezone.utc)
_MIN_TIME = datetime.min.replace(tzinfo=timezone.utc)
_MAX_NUMERIC_TIME = to_numeric_time(_MAX_TIME)
_MIN_NUMERIC_TIME = to_numeric_time(_MIN_TIME)


def from_numeric_time(val: float) -> datetime:
    """
    Inverse of to_numeric_time. Float seconds round datetime.max up past the end of
    the range, so values within a second beyond either end clamp to it; anything
    further out raises OverflowError.
    """
    if _MAX_NUMERIC_TIME <= val < _MAX_NUMERIC_TIME + 1:
        return _MAX_TIME
    if _MIN_NUMERIC_TIME - 1 < val <= _MIN_NUMERIC_TIME:
        return _MIN_TIME
    return EPOCH + timedelta(seconds=val)


def _is_number(val: Any) -> bool:
    return isinstance(val, (int, float)) and not isinstance(val, bool)


@dataclass
class ClaimSet:
    issuer: str = ""
    subject: str = ""
    audiences: Audiences = field(default_factory=Audiences)
    expires: datetime | None = None
    not_before: datetime | None = None
    issued: datetime | None = None
    id: str = ""
    extra: dict[str, Any] = field(default_factory=dict)

    def to_payload(self, scalar_audience: bool = False) -> dict[str, Any]:
        """
        JSON-ready payload. Empty registered fields are omitted.
        With scalar_audience, aud is the first audience as a plain string.
        """
        payload = dict(self.extra)
        if self.issuer:
            payload[ISSUER] = self.issuer
        if self.subject:
            payload[SUBJECT] = self.subject
        if self.audiences:
            payload[AUDIENCE] = self.audiences[0] if scalar_audience else list(self.audiences)
        for name in TIME_FIELDS:
            value = getattr(self, _FIELD_ATTRS[name])
            if value is not None:
                payload[name] = to_numeric_time(value)
        if self.id:
            payload[ID] = self.id
        return payload

    @classmethod
    def from_payload(cls, payload: Any) -> "ClaimSet":
        """Split a decoded payload into registered fields and extensions."""
        if not isinstance(payload, dict):
            raise MalformedClaimsError("payload is not a JSON object")
        extra = dict(payload)
        claim_set = cls()

        for name in (ISSUER, SUBJECT, ID):
            if name in extra:
                value = extra.pop(name)
                if not isinstance(value, str):
                    raise MalformedClaimsError(f"{name} is not a string")
                setattr(claim_set, _FIELD_ATTRS[name], value)

        if AUDIENCE in extra:
            value = extra.pop(AUDIENCE)
            if isinstance(value, str):
                claim_set.audiences = Audiences([value])
            elif is_string_sequence(value):
                claim_set.audiences = Audiences(value)
            else:
                raise MalformedClaimsError("aud is not a string or array of strings")

        for name in TIME_FIELDS:
            if name in extra:
                value = extra.pop(name)
                if not _is_number(value):
                    raise MalformedClaimsError(f"{name} is not a numeric time")
                try:
                    setattr(claim_set, _FIELD_ATTRS[name], from_numeric_time(value))
                except (OverflowError, ValueError) as e:
                    raise MalformedClaimsError(f"{name} is out of range") from e

        claim_set.extra = extra
        return claim_set


def _claim_time(claim: Claim) -> datetime:
    if not isinstance(claim.value, int) or isinstance(claim.value, bool):
        raise ClaimFormatInvalidError(f"time claim type: {claim.key}")
    return claim.time()


def _construct_registered(claim_set: ClaimSet, claim: Claim) -> None:
    name = claim.field()
    attr = _FIELD_ATTRS[name]

    if name in TIME_FIELDS:
        if claim.type is not ClaimType.TIME:
            raise InvalidTypeForClaimError(name)
        setattr(claim_set, attr, _claim_time(claim))
    elif name == AUDIENCE:
        if claim.type is ClaimType.STRING and isinstance(claim.value, str):
            claim_set.audiences = Audiences([claim.value])
        elif claim.type is ClaimType.STRINGS:
            if not is_string_sequence(claim.value):
                raise ClaimFormatInvalidError(f"[]string claim type: {claim.key}")
            claim_set.audiences = Audiences(claim.value)
        else:
            raise InvalidTypeForClaimError(name)
    else:
        if claim.type is not ClaimType.STRING or not isinstance(claim.value, str):
            raise InvalidTypeForClaimError(name)
        setattr(claim_set, attr, claim.value)


def _resource_actions_value(claim: Claim) -> Any:
    value = claim.value
    if isinstance(value, ResourceActions):
        return value.to_dict()
    if isinstance(value, (list, tuple)) and all(isinstance(v, ResourceActions) for v in value):
        return [v.to_dict() for v in value]
    raise ClaimFormatInvalidError(f"resource action claim type: {claim.key}")


def _construct_extension(claim_set: ClaimSet, claim: Claim) -> None:
    if claim.type not in SIGNABLE_TYPES:
        raise UnsupportedClaimTypeError(claim.type, claim.key)

    value = claim.value
    if claim.type in INTEGER_TYPES:
        if not isinstance(value, int) or isinstance(value, bool):
            raise ClaimFormatInvalidError(f"int claim type: {claim.key}")
        claim_set.extra[claim.key] = value
    elif claim.type is ClaimType.STRING:
        if not isinstance(value, str):
            raise ClaimFormatInvalidError(f"string claim type: {claim.key}")
        claim_set.extra[claim.key] = value
    elif claim.type is ClaimType.STRINGS:
        if not is_string_sequence(value):
            raise ClaimFormatInvalidError(f"[]string claim type: {claim.key}")
        claim_set.extra[claim.key] = list(value)
    elif claim.type is ClaimType.BOOL:
        if not isinstance(value, bool):
            raise ClaimFormatInvalidError(f"bool claim type: {claim.key}")
        claim_set.extra[claim.key] = value
    elif claim.type is ClaimType.TIME:
        claim_set.extra[claim.key] = to_numeric_time(_claim_time(claim))
    elif claim.type is ClaimType.RESOURCE_ACTION:
        claim_set.extra[claim.key] = _resource_actions_value(claim)


def construct_claim_set(*claims: Claim) -> ClaimSet:
    """
    Fold claims, in order, into a ClaimSet. Registered claims fill the registered
    fields, everything else goes to the extension mapping. A later claim with the
    same key replaces an earlier one.
    """
    claim_set = ClaimSet()
    for claim in claims:
        if claim.is_registered():
            _construct_registered(claim_set, claim)
        else:
            _construct_extension(claim_set, claim)

    if not claim_set.id:
        claim_set.id = str(uuid.uuid4())
    return claim_set
