from crumbs.codec import CookieCodec
from crumbs.config import Config, options_from_config
from crumbs.exceptions import CookieDecodeError, CookieTampered, CrumbsError, InvalidArgument
from crumbs.middleware import CookieStoreMiddleware, get_cookie_store
from crumbs.options import CookieOptions
from crumbs.serializers import CookieSerializer, JSONCookieSerializer
from crumbs.signing import PayloadSigner
from crumbs.store import SignedCookieStore
from crumbs.transport import CookieTransport, HeaderTransport, build_set_cookie_header
from crumbs.types import CookieAttributes, CookieValue, Entry, SameSite

__all__ = [
    "SignedCookieStore",
    "CookieStoreMiddleware",
    "get_cookie_store",
    "CookieOptions",
    "Config",
    "options_from_config",
    "CookieCodec",
    "PayloadSigner",
    "CookieSerializer",
    "JSONCookieSerializer",
    "CookieTransport",
    "HeaderTransport",
    "build_set_cookie_header",
    "CookieAttributes",
    "CookieValue",
    "Entry",
    "SameSite",
    "CrumbsError",
    "InvalidArgument",
    "CookieDecodeError",
    "CookieTampered",
]
