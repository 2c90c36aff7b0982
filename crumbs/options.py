from __future__ import annotations

import dataclasses
import typing

from crumbs.exceptions import InvalidArgument
from crumbs.types import CookieAttributes, SameSite

DEFAULT_TTL = 2592000  # 30 days


@dataclasses.dataclass(frozen=True)
class CookieOptions:
    """Attributes of the outgoing cookie."""

    ttl: int = DEFAULT_TTL
    path: str | None = "/"
    domain: str | None = None
    secure: typing.Any = False
    httponly: typing.Any = True
    samesite: typing.Any = SameSite.STRICT.value

    def __post_init__(self) -> None:
        if isinstance(self.ttl, bool) or not isinstance(self.ttl, int) or self.ttl <= 0:
            raise InvalidArgument("Cookie option 'ttl' must be a positive integer.")

    def merge(self, overrides: typing.Mapping[str, typing.Any] | None) -> CookieOptions:
        """Return a copy with keys from `overrides` replacing current values."""
        if not overrides:
            return self

        known = {field.name for field in dataclasses.fields(self)}
        unknown = set(overrides) - known
        if unknown:
            raise InvalidArgument(f"Unknown cookie options: {', '.join(sorted(unknown))}.")

        return dataclasses.replace(self, **overrides)

    def to_attributes(self, now: float) -> CookieAttributes:
        attributes = CookieAttributes(expires=int(now) + self.ttl)
        if self.path:
            attributes.path = self.path
        if self.domain:
            attributes.domain = self.domain
        if isinstance(self.secure, bool):
            attributes.secure = self.secure
        if isinstance(self.httponly, bool):
            attributes.httponly = self.httponly
        if SameSite.parse(self.samesite) is not None:
            attributes.samesite = str(self.samesite)
        return attributes


def make_options(options: CookieOptions | typing.Mapping[str, typing.Any] | None) -> CookieOptions:
    if isinstance(options, CookieOptions):
        return options
    return CookieOptions().merge(options)
