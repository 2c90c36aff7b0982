import os
import pathlib
import typing

from starlette.config import Config as BaseConfig
from starlette.config import Environ

from crumbs.options import DEFAULT_TTL, CookieOptions

__all__ = ["Config", "options_from_config"]


class Config(BaseConfig):
    def __init__(
        self,
        env_files: list[str | pathlib.Path] | None = None,
        env_prefix: str = "",
        environ: typing.Mapping[str, str] | None = None,
    ):
        env_files = env_files or []
        super().__init__(None, Environ() if environ is None else environ, env_prefix)
        for env_file in env_files:
            if os.path.isfile(env_file):
                self.file_values.update(BaseConfig(env_file).file_values)


def options_from_config(config: BaseConfig, prefix: str = "COOKIE_") -> CookieOptions:
    """
    Read cookie options from environment.

    Recognized variables: TTL, PATH, DOMAIN, SECURE, HTTPONLY, SAMESITE,
    each prefixed with `prefix`.
    """
    return CookieOptions(
        ttl=config(f"{prefix}TTL", cast=int, default=DEFAULT_TTL),
        path=config(f"{prefix}PATH", default="/") or None,
        domain=config(f"{prefix}DOMAIN", default=None) or None,
        secure=config(f"{prefix}SECURE", cast=bool, default=False),
        httponly=config(f"{prefix}HTTPONLY", cast=bool, default=True),
        samesite=config(f"{prefix}SAMESITE", default="Strict"),
    )
