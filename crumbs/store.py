from __future__ import annotations

import logging
import time
import typing

from crumbs.codec import CookieCodec
from crumbs.exceptions import CookieDecodeError, CookieTampered, InvalidArgument
from crumbs.options import CookieOptions, make_options
from crumbs.serializers import CookieSerializer
from crumbs.transport import CookieTransport
from crumbs.types import Clock, CookieValue, Entry, is_cookie_value

logger = logging.getLogger(__name__)

_T = typing.TypeVar("_T")
_V = typing.TypeVar("_V", bound=CookieValue)


def _validate_ttl(ttl: int | None) -> int | None:
    if ttl is None:
        return None
    if isinstance(ttl, bool) or not isinstance(ttl, int):
        raise InvalidArgument("Cookie ttl must be null or positive integer.")
    ttl = abs(ttl)
    if ttl == 0:
        raise InvalidArgument("Cookie ttl must be null or positive.")
    return ttl


def _validate_item(key: typing.Any, value: typing.Any) -> None:
    if not isinstance(key, str) or not key:
        raise InvalidArgument("Cookie key must be a non-empty string.")
    if not is_cookie_value(value):
        raise InvalidArgument("Cookie value can only be string, boolean or numeric.")


class SignedCookieStore:
    """
    Many named values multiplexed into a single signed cookie.

    The incoming cookie is decoded once, on construction. All mutations are
    staged in memory and written back by `flush()`, at most once per change.
    Use the store as a context manager (or call `close()`) so pending changes
    are flushed when the request ends.

    Expired entries are evicted lazily: `has`, `get`, `pull` and `all` delete
    the expired entries they touch and mark the store as changed.
    """

    def __init__(
        self,
        name: str,
        salt: str,
        transport: CookieTransport,
        options: CookieOptions | typing.Mapping[str, typing.Any] | None = None,
        *,
        clock: Clock = time.time,
        serializer: CookieSerializer | None = None,
    ) -> None:
        name = name.strip() if isinstance(name, str) else ""
        salt = salt.strip() if isinstance(salt, str) else ""
        if not name or not salt:
            raise InvalidArgument("Cookie name and salt value cannot be empty.")

        self.name = name
        self.options = make_options(options)
        self.transport = transport
        self.clock = clock
        self._codec = CookieCodec(salt, serializer)
        self._dirty = False
        self._entries: dict[str, Entry] = self._decode()

    @property
    def is_dirty(self) -> bool:
        return self._dirty

    def has(self, key: str) -> bool:
        return self._lookup(key) is not None

    def get(self, key: str, default: _T | None = None) -> CookieValue | _T | None:
        entry = self._lookup(key)
        if entry is None:
            return default
        return entry.value

    def pull(self, key: str, default: _T | None = None) -> CookieValue | _T | None:
        """Return the value and remove the key."""
        value = self.get(key, default)
        self.remove(key)
        return value

    def set(self, key: str, value: CookieValue, ttl: int | None = None) -> SignedCookieStore:
        """
        Stage a value. `ttl` is a lifetime in seconds, None keeps the value until removed.

        The value is sent to the client on the next `flush()`.
        """
        _validate_item(key, value)
        expires_at = self._expires_at(_validate_ttl(ttl))
        self._entries[key] = Entry(value=value, expires_at=expires_at)
        self._dirty = True
        return self

    def set_many(self, values: typing.Mapping[str, CookieValue], ttl: int | None = None) -> SignedCookieStore:
        """Stage several values sharing one ttl. Nothing is changed if any item is invalid."""
        ttl = _validate_ttl(ttl)
        for key, value in values.items():
            _validate_item(key, value)

        expires_at = self._expires_at(ttl)
        self._entries.update({key: Entry(value=value, expires_at=expires_at) for key, value in values.items()})
        self._dirty = True
        return self

    def push(self, key: str, value: _V, ttl: int | None = None) -> _V:
        self.set(key, value, ttl)
        return value

    def all(self) -> dict[str, CookieValue]:
        self._sweep()
        return {key: entry.value for key, entry in self._entries.items()}

    def remove(self, *keys: str) -> SignedCookieStore:
        for key in keys:
            self._entries.pop(key, None)
        self._dirty = True
        return self

    def clear(self) -> bool:
        """Remove all values. The cookie itself stays on the client until the next flush."""
        self._entries.clear()
        self._dirty = True
        return True

    def destroy(self) -> bool:
        """Expire the cookie on the client right away."""
        result = self._call_transport(
            "expire",
            self.transport.expire_cookie,
            self.name,
            path=self.options.path or None,
            domain=self.options.domain or None,
        )
        logger.debug('Expiring cookie "%s" (%s).', self.name, "ok" if result else "failed")
        if result:
            self._entries.clear()
            self._dirty = False
        return result

    def flush(self) -> bool:
        """Send staged changes to the client. Does nothing when there are no changes."""
        if not self._dirty:
            return True

        self._dirty = False
        now = self.clock()
        attributes = self.options.to_attributes(now)
        value = self._codec.encode(self._entries, now)
        logger.debug('Writing cookie "%s" (%d bytes).', self.name, len(value))
        return self._call_transport("write", self.transport.write_cookie, self.name, value, attributes)

    def close(self) -> None:
        self.flush()

    def __enter__(self) -> SignedCookieStore:
        return self

    def __exit__(self, *args: typing.Any) -> None:
        self.close()

    def __contains__(self, key: str) -> bool:
        return self.has(key)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}: name={self.name!r} dirty={self._dirty}>"

    def _decode(self) -> dict[str, Entry]:
        raw = self.transport.read_incoming_cookie(self.name)
        try:
            return self._codec.decode(raw)
        except CookieTampered:
            logger.warning('Cookie "%s" has invalid signature, discarding its contents.', self.name)
        except CookieDecodeError as ex:
            logger.debug('Cookie "%s" cannot be decoded: %s', self.name, ex)
        self._dirty = True
        return {}

    def _lookup(self, key: str) -> Entry | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.is_expired(self.clock()):
            self.remove(key)
            return None
        return entry

    def _sweep(self) -> None:
        now = self.clock()
        expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
        if expired:
            self.remove(*expired)

    def _expires_at(self, ttl: int | None) -> int | None:
        if ttl is None:
            return None
        return int(self.clock()) + ttl

    def _call_transport(
        self, action: str, fn: typing.Callable[..., bool], *args: typing.Any, **kwargs: typing.Any
    ) -> bool:
        try:
            return bool(fn(*args, **kwargs))
        except Exception:
            logger.exception('Failed to %s cookie "%s".', action, self.name)
            return False
