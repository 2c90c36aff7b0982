from __future__ import annotations

import json
import time

import click

from crumbs.codec import CookieCodec
from crumbs.exceptions import CookieDecodeError, CookieTampered
from crumbs.types import Entry, is_cookie_value


@click.group("crumbs", help="Signed cookie tools.")
@click.option("--salt", envvar="CRUMBS_SALT", required=True, help="Secret used to sign cookie values.")
@click.pass_context
def main(ctx: click.Context, salt: str) -> None:
    ctx.obj = CookieCodec(salt.strip())


@main.command("encode")
@click.option("--ttl", type=int, default=None, help="Lifetime of each value, in seconds.")
@click.argument("pairs", nargs=-1, metavar="KEY=VALUE...")
@click.pass_obj
def encode_command(codec: CookieCodec, ttl: int | None, pairs: tuple[str, ...]) -> None:
    """Build a cookie value from KEY=VALUE pairs. Values are parsed as JSON when possible."""
    if ttl == 0:
        raise click.BadParameter("ttl must be omitted or non-zero.", param_hint="--ttl")
    now = time.time()
    expires_at = int(now) + abs(ttl) if ttl is not None else None
    entries: dict[str, Entry] = {}
    for pair in pairs:
        key, sep, raw_value = pair.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"Expected KEY=VALUE, got {pair!r}.", param_hint="PAIRS")
        try:
            value = json.loads(raw_value)
        except ValueError:
            value = raw_value
        if not is_cookie_value(value):
            value = raw_value
        entries[key] = Entry(value=value, expires_at=expires_at)
    click.echo(codec.encode(entries, now))


@main.command("decode")
@click.argument("value")
@click.pass_obj
def decode_command(codec: CookieCodec, value: str) -> None:
    """Verify signature and print stored values as JSON."""
    try:
        entries = codec.decode(value)
    except CookieTampered:
        raise click.ClickException("Cookie signature does not match.")
    except CookieDecodeError as exc:
        raise click.ClickException(str(exc))

    now = time.time()
    click.echo(
        json.dumps(
            {
                key: {"value": entry.value, "expires_at": entry.expires_at, "expired": entry.is_expired(now)}
                for key, entry in entries.items()
            },
            indent=2,
        )
    )
