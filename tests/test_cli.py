import json

import pytest
from click.testing import CliRunner

from crumbs.cli import main
from crumbs.codec import CookieCodec
from crumbs.types import Entry


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


def test_encode(runner: CliRunner) -> None:
    result = runner.invoke(main, ["--salt", "secret", "encode", "theme=dark", "count=3", "admin=false"])
    assert result.exit_code == 0, result.output
    assert CookieCodec("secret").decode(result.output.strip()) == {
        "theme": Entry("dark"),
        "count": Entry(3),
        "admin": Entry(False),
    }


def test_encode_with_ttl(runner: CliRunner) -> None:
    result = runner.invoke(main, ["--salt", "secret", "encode", "--ttl", "60", "a=1"])
    entries = CookieCodec("secret").decode(result.output.strip())
    assert entries["a"].expires_at is not None


def test_encode_rejects_bad_pair(runner: CliRunner) -> None:
    result = runner.invoke(main, ["--salt", "secret", "encode", "novalue"])
    assert result.exit_code != 0
    assert "Expected KEY=VALUE" in result.output


def test_decode(runner: CliRunner) -> None:
    value = CookieCodec("secret").encode({"theme": Entry("dark")}, 0)
    result = runner.invoke(main, ["decode", value], env={"CRUMBS_SALT": "secret"})
    assert result.exit_code == 0, result.output
    assert json.loads(result.output) == {"theme": {"value": "dark", "expires_at": None, "expired": False}}


def test_decode_tampered(runner: CliRunner) -> None:
    value = CookieCodec("secret").encode({"theme": Entry("dark")}, 0)
    result = runner.invoke(main, ["--salt", "other", "decode", value])
    assert result.exit_code == 1
    assert "signature does not match" in result.output


def test_decode_garbage(runner: CliRunner) -> None:
    result = runner.invoke(main, ["--salt", "secret", "decode", "!!!"])
    assert result.exit_code == 1
    assert "not a valid envelope" in result.output


def test_encode_rejects_zero_ttl(runner: CliRunner) -> None:
    result = runner.invoke(main, ["--salt", "secret", "encode", "--ttl", "0", "a=1"])
    assert result.exit_code == 2
    assert "non-zero" in result.output
