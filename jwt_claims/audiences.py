"""
Audience set: an ordered sequence of audience strings compared case-insensitively.
An empty list of audiences to check never matches, so an unconfigured verifier
cannot accept every token.
"""
from collections.abc import Iterable


def _fold(value: str) -> str:
    return value.casefold()


class Audiences(tuple):
    """Immutable ordered audiences. Duplicates are allowed."""

    def __new__(cls, audiences: Iterable[str] = ()):
        if isinstance(audiences, str):
            audiences = (audiences,)
        return super().__new__(cls, audiences)

    def __repr__(self) -> str:
        return f"Audiences({list(self)!r})"

    def has(self, audience: str) -> bool:
        """True if any audience equals audience."""
        folded = _fold(audience)
        return any(_fold(aud) == folded for aud in self)

    def has_any(self, audiences: Iterable[str]) -> bool:
        """True if at least one of audiences is in the set. Empty audiences never match."""
        return any(self.has(aud) for aud in Audiences(audiences))

    def has_all(self, audiences: Iterable[str]) -> bool:
        """True if every one of audiences is in the set. Empty audiences never match."""
        audiences = Audiences(audiences)
        if not audiences:
            return False
        return all(self.has(aud) for aud in audiences)

    def has_only(self, audiences: Iterable[str]) -> bool:
        """
        True if audiences and the set have the same length and has_all(audiences) holds.
        Length is compared positionally, so duplicates count.
        """
        audiences = Audiences(audiences)
        if not audiences or len(audiences) != len(self):
            return False
        return self.has_all(audiences)

    def accepted(self, claim_audiences: Iterable[str]) -> "Audiences":
        """
        Ordered intersection with claim_audiences. Order follows this set; matched
        values keep the spelling used in claim_audiences.
        """
        claim_audiences = Audiences(claim_audiences)
        return Audiences(
            claim
            for aud in self
            for claim in claim_audiences
            if _fold(aud) == _fold(claim)
        )

    def slice(self) -> list[str]:
        return list(self)
