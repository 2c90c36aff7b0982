import dataclasses
import typing

import pytest
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.routing import BaseRoute
from starlette.testclient import TestClient
from starlette.types import ASGIApp

from crumbs.store import SignedCookieStore
from crumbs.types import CookieAttributes

SALT = "s3cr3t-salt"
COOKIE_NAME = "app"


class FakeClock:
    def __init__(self, now: float = 1_700_000_000) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@dataclasses.dataclass
class Write:
    name: str
    value: str
    attributes: CookieAttributes


class RecordingTransport:
    def __init__(self, incoming: dict[str, str] | None = None) -> None:
        self.incoming = incoming or {}
        self.writes: list[Write] = []
        self.expired: list[str] = []
        self.result = True
        self.error: Exception | None = None

    def read_incoming_cookie(self, name: str) -> str | None:
        return self.incoming.get(name)

    def write_cookie(self, name: str, value: str, attributes: CookieAttributes) -> bool:
        if self.error:
            raise self.error
        self.writes.append(Write(name, value, attributes))
        return self.result

    def expire_cookie(self, name: str, path: str | None = None, domain: str | None = None) -> bool:
        if self.error:
            raise self.error
        self.expired.append(name)
        return self.result


class StoreFactory(typing.Protocol):  # pragma: nocover
    def __call__(
        self,
        incoming: str | None = None,
        options: typing.Mapping[str, typing.Any] | None = None,
        salt: str = SALT,
    ) -> SignedCookieStore:
        ...


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture
def store_factory(clock: FakeClock, transport: RecordingTransport) -> StoreFactory:
    def factory(
        incoming: str | None = None,
        options: typing.Mapping[str, typing.Any] | None = None,
        salt: str = SALT,
    ) -> SignedCookieStore:
        if incoming is not None:
            transport.incoming[COOKIE_NAME] = incoming
        return SignedCookieStore(COOKIE_NAME, salt, transport, options, clock=clock)

    return factory


@pytest.fixture
def store(store_factory: StoreFactory) -> SignedCookieStore:
    return store_factory()


class ClientFactory(typing.Protocol):  # pragma: nocover
    def __call__(
        self,
        middleware: list[Middleware] | None = None,
        routes: typing.Iterable[BaseRoute] | None = None,
        raise_server_exceptions: bool = True,
        app: ASGIApp | None = None,
        **kwargs: typing.Any,
    ) -> TestClient:
        ...


@pytest.fixture
def test_client_factory() -> ClientFactory:
    def factory(**kwargs: typing.Any) -> TestClient:
        raise_server_exceptions = kwargs.pop("raise_server_exceptions", True)
        kwargs.setdefault("debug", True)
        kwargs.setdefault("routes", [])
        kwargs.setdefault("middleware", [])
        app = kwargs.pop("app", None) or Starlette(**kwargs)
        return TestClient(app, raise_server_exceptions=raise_server_exceptions)

    return typing.cast(ClientFactory, factory)
