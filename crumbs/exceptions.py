class CrumbsError(Exception):
    """Base class for all cookie store errors."""


class InvalidArgument(CrumbsError, ValueError):
    """Raised when the store is used with an invalid name, salt, key, value or ttl."""


class CookieDecodeError(CrumbsError):
    """The incoming cookie value cannot be decoded (bad base64, envelope or payload)."""


class CookieTampered(CookieDecodeError):
    """The incoming cookie payload does not match its signature."""
