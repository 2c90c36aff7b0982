"""
Wire format of the signed cookie.

    base64url(envelope({"cookies": payload, "signature": mac(salt, payload)}))

where `payload` is the serialized `{key: {"value": value, "ttl": expires_at}}`
map. Base64 padding is stripped so the value never needs cookie quoting.
"""

from __future__ import annotations

import base64
import binascii
import typing

from crumbs.exceptions import CookieDecodeError, CookieTampered
from crumbs.serializers import CookieSerializer, JSONCookieSerializer
from crumbs.signing import PayloadSigner
from crumbs.types import Entry, is_cookie_value

ENVELOPE_FIELDS = frozenset({"cookies", "signature"})
MAX_COOKIE_LENGTH = 4096


def b64encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def b64decode(value: str) -> bytes:
    raw = value.encode("ascii")
    raw += b"=" * (-len(raw) % 4)
    return base64.b64decode(raw, altchars=b"-_", validate=True)


class CookieCodec:
    def __init__(self, salt: str, serializer: CookieSerializer | None = None) -> None:
        self.signer = PayloadSigner(salt)
        self.serializer = serializer or JSONCookieSerializer()

    def encode(self, entries: typing.Mapping[str, Entry], now: float) -> str:
        """Serialize and sign all entries that are not expired at `now`."""
        payload = self.serializer.dumps(
            {
                key: {"value": entry.value, "ttl": entry.expires_at}
                for key, entry in entries.items()
                if not entry.is_expired(now)
            }
        )
        envelope = self.serializer.dumps({"cookies": payload, "signature": self.signer.signature(payload)})
        return b64encode(envelope.encode("utf-8"))

    def decode(self, raw: str | None) -> dict[str, Entry]:
        """
        Verify and deserialize a raw cookie value.

        Returns an empty map for a missing cookie. Raises CookieDecodeError
        for malformed input and CookieTampered when the signature does not
        match the payload.
        """
        if not raw:
            return {}
        if len(raw) > MAX_COOKIE_LENGTH:
            raise CookieDecodeError("Cookie value is too long.")

        try:
            envelope = self.serializer.loads(b64decode(raw).decode("utf-8"))
        except (ValueError, binascii.Error, RecursionError) as ex:
            raise CookieDecodeError("Cookie value is not a valid envelope.") from ex

        if not isinstance(envelope, dict) or set(envelope) != ENVELOPE_FIELDS:
            raise CookieDecodeError("Cookie envelope has unexpected shape.")

        payload, signature = envelope["cookies"], envelope["signature"]
        if not isinstance(payload, str) or not isinstance(signature, str):
            raise CookieDecodeError("Cookie envelope fields must be strings.")

        if not self.signer.verify(payload, signature):
            raise CookieTampered("Cookie signature does not match.")

        try:
            data = self.serializer.loads(payload)
        except (ValueError, RecursionError) as ex:
            raise CookieDecodeError("Cookie payload cannot be deserialized.") from ex
        return parse_entries(data)


def parse_entries(data: typing.Any) -> dict[str, Entry]:
    if not isinstance(data, dict):
        raise CookieDecodeError("Cookie payload must be a map.")

    entries: dict[str, Entry] = {}
    for key, item in data.items():
        if not isinstance(key, str) or not key:
            raise CookieDecodeError("Cookie keys must be non-empty strings.")
        if not isinstance(item, dict) or "value" not in item:
            raise CookieDecodeError(f'Cookie entry "{key}" is malformed.')

        value, expires_at = item["value"], item.get("ttl")
        if not is_cookie_value(value):
            raise CookieDecodeError(f'Cookie entry "{key}" has unsupported value type.')
        if expires_at is not None and (isinstance(expires_at, bool) or not isinstance(expires_at, int)):
            raise CookieDecodeError(f'Cookie entry "{key}" has invalid expiry.')
        entries[key] = Entry(value=value, expires_at=expires_at)
    return entries
