from __future__ import annotations

import dataclasses
import enum
import math
import typing

CookieValue = typing.Union[str, bool, int, float]
Clock = typing.Callable[[], float]


class SameSite(enum.StrEnum):
    NONE = "None"
    LAX = "Lax"
    STRICT = "Strict"

    @classmethod
    def parse(cls, value: typing.Any) -> SameSite | None:
        """Case-insensitive lookup. Returns None for anything that is not none/lax/strict."""
        if isinstance(value, SameSite):
            return value
        if not isinstance(value, str):
            return None
        for member in cls:
            if member.value.lower() == value.lower():
                return member
        return None


@dataclasses.dataclass
class Entry:
    value: CookieValue
    expires_at: int | None = None

    def is_expired(self, now: float) -> bool:
        return self.expires_at is not None and now > self.expires_at


@dataclasses.dataclass
class CookieAttributes:
    expires: int
    path: str | None = None
    domain: str | None = None
    secure: bool | None = None
    httponly: bool | None = None
    samesite: str | None = None


def is_cookie_value(value: typing.Any) -> bool:
    if isinstance(value, (str, bool, int)):
        return True
    if isinstance(value, float):
        return math.isfinite(value)
    return False
