from __future__ import annotations

import logging
import time
import typing

from starlette.datastructures import MutableHeaders
from starlette.requests import HTTPConnection
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from crumbs.options import CookieOptions, make_options
from crumbs.serializers import CookieSerializer
from crumbs.store import SignedCookieStore
from crumbs.transport import HeaderTransport
from crumbs.types import Clock

logger = logging.getLogger(__name__)

SCOPE_KEY = "cookie_stores"


class CookieStoreMiddleware:
    """
    Creates a signed cookie store for each HTTP request.

    The store is flushed right before the response starts and its Set-Cookie
    headers are added to the response. Changes made after that are lost.
    """

    def __init__(
        self,
        app: ASGIApp,
        name: str,
        salt: str,
        options: CookieOptions | typing.Mapping[str, typing.Any] | None = None,
        *,
        clock: Clock = time.time,
        serializer: CookieSerializer | None = None,
    ) -> None:
        self.app = app
        self.name = name
        self.salt = salt
        self.options = make_options(options)
        self.clock = clock
        self.serializer = serializer

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":  # pragma: no cover
            return await self.app(scope, receive, send)

        connection = HTTPConnection(scope)
        transport = HeaderTransport(connection.cookies, clock=self.clock)
        store = SignedCookieStore(
            self.name,
            self.salt,
            transport,
            self.options,
            clock=self.clock,
            serializer=self.serializer,
        )
        scope.setdefault(SCOPE_KEY, {})[store.name] = store

        async def sender(message: Message) -> None:
            if message["type"] == "http.response.start":
                store.close()
                headers = MutableHeaders(raw=message["headers"])
                for header in transport.drain():
                    headers.append("set-cookie", header)
            await send(message)

        await self.app(scope, receive, sender)

        if store.is_dirty:
            logger.warning('Cookie store "%s" changed after the response had started, changes are lost.', store.name)


def get_cookie_store(request: HTTPConnection, name: str | None = None) -> SignedCookieStore:
    """Return the store created by CookieStoreMiddleware. `name` may be omitted when there is only one."""
    assert SCOPE_KEY in request.scope, "Cookie stores require CookieStoreMiddleware."
    stores: dict[str, SignedCookieStore] = request.scope[SCOPE_KEY]
    if name is None:
        assert len(stores) == 1, "Several cookie stores are installed, pass the cookie name."
        return next(iter(stores.values()))
    return stores[name]
