"""
Claim value model: a tagged key/value pair attached to a token.
Registered keys (RFC 7519 section 4.1) are matched case-insensitively against their
3-letter codes and long-form aliases. Typed constructors set the discriminant; readers
branch on Claim.type, never on the runtime type of Claim.value.
"""
from dataclasses import dataclass, field as dataclass_field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any

from jwt_claims.errors import InvalidClaimTypeError

ISSUER = "iss"
SUBJECT = "sub"
AUDIENCE = "aud"
EXPIRES = "exp"
NOT_BEFORE = "nbf"
ISSUED = "iat"
ID = "jti"

# Informal extensions read by the verifier.
ONLINE = "onl"
FINGERPRINT = "fpt"

_REGISTERED_ALIASES = {
    "issuer": ISSUER,
    ISSUER: ISSUER,
    "subject": SUBJECT,
    SUBJECT: SUBJECT,
    "audience": AUDIENCE,
    AUDIENCE: AUDIENCE,
    "expires": EXPIRES,
    EXPIRES: EXPIRES,
    "notbefore": NOT_BEFORE,
    NOT_BEFORE: NOT_BEFORE,
    "issued": ISSUED,
    ISSUED: ISSUED,
    "id": ID,
    ID: ID,
}

TIME_FIELDS = (EXPIRES, NOT_BEFORE, ISSUED)

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1


class ClaimType(Enum):
    """Discriminant for Claim.value."""

    # signable
    STRING = "string"
    STRINGS = "strings"
    INT64 = "int64"
    INT32 = "int32"
    INT16 = "int16"
    INT8 = "int8"
    BOOL = "bool"
    TIME = "time"
    RESOURCE_ACTION = "resource_action"

    # displayable only
    UNKNOWN = "unknown"
    REFLECT = "reflect"
    BINARY = "binary"
    BYTE_STRING = "byte_string"
    COMPLEX = "complex"
    DURATION = "duration"
    ERROR = "error"
    FLOAT = "float"
    STRINGER = "stringer"
    UINT = "uint"
    SKIP = "skip"


INTEGER_TYPES = frozenset({ClaimType.INT64, ClaimType.INT32, ClaimType.INT16, ClaimType.INT8})

SIGNABLE_TYPES = INTEGER_TYPES | {
    ClaimType.STRING,
    ClaimType.STRINGS,
    ClaimType.BOOL,
    ClaimType.TIME,
    ClaimType.RESOURCE_ACTION,
}

DISPLAYABLE_TYPES = frozenset(ClaimType)


@dataclass(frozen=True)
class ResourceActions:
    """Allowed actions on a named and typed registry resource (e.g. repository:library/alpine:pull)."""

    type: str
    name: str
    actions: tuple[str, ...] = ()
    class_: str = ""

    def __post_init__(self):
        object.__setattr__(self, "actions", tuple(self.actions))

    def to_dict(self) -> dict:
        data = {"type": self.type}
        if self.class_:
            data["class"] = self.class_
        data["name"] = self.name
        data["actions"] = list(self.actions)
        return data


@dataclass(frozen=True)
class Claim:
    key: str
    type: ClaimType = ClaimType.UNKNOWN
    value: Any = dataclass_field(default=None)

    def is_registered(self) -> bool:
        """True if the key is one of the seven IANA registered JWT claims."""
        return self.key.lower() in _REGISTERED_ALIASES

    def field(self) -> str:
        """Canonical 3-letter code for registered keys; the key itself otherwise."""
        return _REGISTERED_ALIASES.get(self.key.lower(), self.key)

    def time(self) -> datetime:
        """Time value as an aware UTC datetime. Raises InvalidClaimTypeError unless type is TIME."""
        if self.type is not ClaimType.TIME:
            raise InvalidClaimTypeError(f"{self.key} is {self.type.name}, not TIME")
        return nanoseconds_to_datetime(self.value)


def datetime_to_nanoseconds(val: datetime) -> int:
    """Nanoseconds since the Unix epoch; naive datetimes are taken as UTC."""
    if val.tzinfo is None:
        val = val.replace(tzinfo=timezone.utc)
    return (val - EPOCH) // timedelta(microseconds=1) * 1000


def nanoseconds_to_datetime(ns: int) -> datetime:
    return EPOCH + timedelta(microseconds=ns // 1000)


def string_claim(key: str, val: str) -> Claim:
    return Claim(key, ClaimType.STRING, val)


def strings_claim(key: str, val) -> Claim:
    """A single str is one element, not a sequence of characters."""
    if isinstance(val, str):
        val = (val,)
    return Claim(key, ClaimType.STRINGS, tuple(val))


def time_claim(key: str, val: datetime) -> Claim:
    return Claim(key, ClaimType.TIME, datetime_to_nanoseconds(val))


def int64_claim(key: str, val: int) -> Claim:
    if not _INT64_MIN <= val <= _INT64_MAX:
        raise OverflowError(f"claim {key} value {val} does not fit in 64 bits")
    return Claim(key, ClaimType.INT64, val)


def int_claim(key: str, val: int) -> Claim:
    return int64_claim(key, int(val))


def bool_claim(key: str, val: bool) -> Claim:
    return Claim(key, ClaimType.BOOL, val)


def resource_action_claim(key: str, action) -> Claim:
    """Registry resource action claim; accepts one ResourceActions or a sequence of them."""
    if isinstance(action, (list, tuple)):
        action = tuple(action)
    return Claim(key, ClaimType.RESOURCE_ACTION, action)


def reflect_claim(key: str, val: Any) -> Claim:
    """
    Claim holding an arbitrary value. Useful for displaying decoded claims;
    reflect claims cannot be signed.
    """
    return Claim(key, ClaimType.REFLECT, val)


def is_string_sequence(val: Any) -> bool:
    return isinstance(val, (list, tuple)) and all(isinstance(v, str) for v in val)


def any_claim(key: str, value: Any) -> Claim:
    """
    Pick the best typed constructor for value, falling back to a reflect claim.
    bool is tested before int since bool is an int subclass.
    """
    if isinstance(value, bool):
        return bool_claim(key, value)
    if isinstance(value, int) and _INT64_MIN <= value <= _INT64_MAX:
        return int64_claim(key, value)
    if isinstance(value, str):
        return string_claim(key, value)
    if is_string_sequence(value):
        return strings_claim(key, value)
    if isinstance(value, datetime):
        return time_claim(key, value)
    if isinstance(value, ResourceActions):
        return resource_action_claim(key, value)
    return reflect_claim(key, value)
