from __future__ import annotations

import datetime
import http.cookies
import time
import typing
from email.utils import format_datetime

from crumbs.types import Clock, CookieAttributes

EXPIRED_OFFSET = 86400


class CookieTransport(typing.Protocol):  # pragma: nocover
    def read_incoming_cookie(self, name: str) -> str | None:
        ...

    def write_cookie(self, name: str, value: str, attributes: CookieAttributes) -> bool:
        ...

    def expire_cookie(self, name: str, path: str | None = None, domain: str | None = None) -> bool:
        ...


def build_set_cookie_header(name: str, value: str, attributes: CookieAttributes) -> str:
    """Render a Set-Cookie header value the same way Starlette's Response.set_cookie does."""
    cookie: http.cookies.BaseCookie[str] = http.cookies.SimpleCookie()
    cookie[name] = value
    morsel = cookie[name]
    expires = datetime.datetime.fromtimestamp(attributes.expires, tz=datetime.timezone.utc)
    morsel["expires"] = format_datetime(expires, usegmt=True)
    if attributes.path is not None:
        morsel["path"] = attributes.path
    if attributes.domain is not None:
        morsel["domain"] = attributes.domain
    if attributes.secure:
        morsel["secure"] = True
    if attributes.httponly:
        morsel["httponly"] = True
    if attributes.samesite is not None:
        morsel["samesite"] = attributes.samesite
    return cookie.output(header="").strip()


class HeaderTransport:
    """
    Reads cookies from the incoming request and queues outgoing Set-Cookie headers.

    Queued headers are drained by whoever owns the response, usually
    `crumbs.middleware.CookieStoreMiddleware`.
    """

    def __init__(self, cookies: typing.Mapping[str, str], clock: Clock = time.time) -> None:
        self.cookies = cookies
        self.clock = clock
        self.headers: list[str] = []
        self.closed = False

    def read_incoming_cookie(self, name: str) -> str | None:
        return self.cookies.get(name)

    def write_cookie(self, name: str, value: str, attributes: CookieAttributes) -> bool:
        if self.closed:
            return False
        self.headers.append(build_set_cookie_header(name, value, attributes))
        return True

    def expire_cookie(self, name: str, path: str | None = None, domain: str | None = None) -> bool:
        attributes = CookieAttributes(expires=int(self.clock()) - EXPIRED_OFFSET, path=path, domain=domain)
        return self.write_cookie(name, "", attributes)

    def drain(self) -> list[str]:
        """Return queued headers. No more cookies can be written afterwards."""
        headers, self.headers = self.headers, []
        self.closed = True
        return headers
