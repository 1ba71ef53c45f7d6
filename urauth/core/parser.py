"""
URI Parser

Converts raw text into a structured URIPart.

Two explicit character-by-character state machines:
1. The URL machine splits scheme / authority / path / query / fragment.
2. The host machine re-reads the authority for userinfo / host / port,
   including bracketed IPv6 literals with zone ids.

Field values are contiguous runs of characters belonging to the same
field; delimiter states (':', '//', '?', '#') never contribute characters.

NEVER raises anything but URIParseError from parse_url(), and only
registry errors from parse_uri(). Malformed input is an error, not a crash.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from ..schemas import ClaimType, URIPart
from ..schemas.uri import DEFAULT_SCHEME, DEFAULT_SUB_DOMAIN
from .errors import ErrorCode, InvalidInputError


MIN_URI_LENGTH = 3


class ParseErrorKind(str, Enum):
    EMPTY_INPUT = "EmptyInput"
    WHITESPACE = "Whitespace"
    NO_HOST = "NoHost"
    INVALID = "Invalid"


class URIParseError(ValueError):
    """Raised when text is not a URL this parser accepts."""

    def __init__(self, kind: ParseErrorKind, detail: str = ""):
        self.kind = kind
        super().__init__(f"{kind.value}{': ' + detail if detail else ''}")


class _State(Enum):
    SCHEME = "scheme"
    SCHEME_SLASH = "scheme_slash"
    SCHEME_SLASH_SLASH = "scheme_slash_slash"
    SERVER_START = "server_start"
    SERVER = "server"
    SERVER_WITH_AT = "server_with_at"
    PATH = "path"
    QUERY_STRING_START = "query_string_start"
    QUERY_STRING = "query_string"
    FRAGMENT_START = "fragment_start"
    FRAGMENT = "fragment"


class _HostState(Enum):
    USERINFO_START = "userinfo_start"
    USERINFO = "userinfo"
    HOST_START = "host_start"
    HOST = "host"
    HOST_V6_START = "host_v6_start"
    HOST_V6 = "host_v6"
    HOST_V6_END = "host_v6_end"
    HOST_V6_ZONE_START = "host_v6_zone_start"
    HOST_V6_ZONE = "host_v6_zone"
    HOST_PORT_START = "host_port_start"
    HOST_PORT = "host_port"


# Which URL field each state's characters belong to (None = delimiter)
_FIELD_OF_STATE = {
    _State.SCHEME: "scheme",
    _State.SERVER: "host",
    _State.SERVER_WITH_AT: "host",
    _State.PATH: "path",
    _State.QUERY_STRING: "query",
    _State.FRAGMENT: "fragment",
}

_ACCEPTING_HOST_STATES = frozenset({
    _HostState.HOST,
    _HostState.HOST_V6_END,
    _HostState.HOST_PORT,
})


@dataclass
class Url:
    """A parsed URL. Every component is optional."""
    scheme: Optional[str] = None
    userinfo: Optional[str] = None
    host: Optional[str] = None
    port: Optional[str] = None
    path: Optional[str] = None
    query: Optional[str] = None
    fragment: Optional[str] = None

    def convert(self, claim_type: ClaimType) -> URIPart:
        """
        Project onto a URIPart for the given claim type.

        - scheme defaults to https
        - a bare "/" path is dropped
        - Domain: sub-domain is everything up to the second dot from the
          right, defaulting to "www."
        - Contents: sub-domain is everything up to the last dot, if any
        """
        scheme = self.scheme if self.scheme is not None else DEFAULT_SCHEME

        path = self.path
        if path is not None and len(path) == 1:
            path = None

        full_host = self.host or ""
        if not full_host:
            raise URIParseError(ParseErrorKind.NO_HOST)

        split = _sub_domain_split_index(full_host, claim_type)
        if split is not None:
            sub_domain: Optional[str] = full_host[:split + 1]
            host = full_host[split + 1:]
        else:
            sub_domain = None if claim_type.is_contents else DEFAULT_SUB_DOMAIN
            host = full_host

        return URIPart.new(scheme, sub_domain, host, path)


def _sub_domain_split_index(host: str, claim_type: ClaimType) -> Optional[int]:
    """
    Index of the dot that ends the sub-domain.

    file -> None, website.com -> None, sub1.website.com -> 4
    """
    last = host.rfind(".")
    if last < 0:
        return None
    if claim_type.is_contents:
        return last
    second = host.rfind(".", 0, last)
    return second if second >= 0 else None


# ============================================================
# CHARACTER CLASSES
# ============================================================

def _is_alpha(ch: str) -> bool:
    return ch.isascii() and ch.isalpha()


def _is_alnum(ch: str) -> bool:
    return ch.isascii() and ch.isalnum()


def _is_mark(ch: str) -> bool:
    return ch in "-_.!~*'()"


def _is_userinfo_char(ch: str) -> bool:
    return _is_alnum(ch) or _is_mark(ch) or ch in "%;:&=+$,"


def _is_url_char(ch: str) -> bool:
    return not (ch <= "\x1f" or ch in "#?\x7f")


def _is_host_char(ch: str) -> bool:
    return _is_alnum(ch) or ch in ".-"


def _is_hex(ch: str) -> bool:
    return ch in "0123456789abcdefABCDEF"


# ============================================================
# URL STATE MACHINE
# ============================================================

def _start_state(ch: str) -> _State:
    if ch in "/*":
        return _State.PATH
    if _is_alpha(ch):
        return _State.SCHEME
    raise URIParseError(ParseErrorKind.INVALID, f"unexpected first character {ch!r}")


def _next_state(state: _State, ch: str) -> _State:
    if state == _State.SCHEME:
        if _is_alpha(ch):
            return state
        if ch == ":":
            return _State.SCHEME_SLASH

    elif state == _State.SCHEME_SLASH:
        if ch == "/":
            return _State.SCHEME_SLASH_SLASH

    elif state == _State.SCHEME_SLASH_SLASH:
        if ch == "/":
            return _State.SERVER_START

    elif state in (_State.SERVER_WITH_AT, _State.SERVER_START, _State.SERVER):
        if state == _State.SERVER_WITH_AT and ch == "@":
            raise URIParseError(ParseErrorKind.INVALID, "repeated '@' in authority")
        if ch == "/":
            return _State.PATH
        if ch == "?":
            return _State.QUERY_STRING_START
        if ch == "@":
            return _State.SERVER_WITH_AT
        if _is_userinfo_char(ch) or ch in "[]":
            return _State.SERVER

    elif state == _State.PATH:
        if _is_url_char(ch):
            return state
        if ch == "?":
            return _State.QUERY_STRING_START
        if ch == "#":
            return _State.FRAGMENT_START

    elif state in (_State.QUERY_STRING_START, _State.QUERY_STRING):
        # extra '?' is allowed inside a query string
        if _is_url_char(ch) or ch == "?":
            return _State.QUERY_STRING
        if ch == "#":
            return _State.FRAGMENT_START

    elif state == _State.FRAGMENT_START:
        if _is_url_char(ch):
            return _State.FRAGMENT

    elif state == _State.FRAGMENT:
        if _is_url_char(ch):
            return state

    raise URIParseError(ParseErrorKind.INVALID, f"unexpected {ch!r} in {state.value}")


# ============================================================
# HOST STATE MACHINE
# ============================================================

def _next_host_state(state: _HostState, ch: str) -> _HostState:
    if state in (_HostState.USERINFO, _HostState.USERINFO_START):
        if ch == "@":
            return _HostState.HOST_START
        if _is_userinfo_char(ch):
            return _HostState.USERINFO

    elif state == _HostState.HOST_START:
        if ch == "[":
            return _HostState.HOST_V6_START
        if _is_host_char(ch):
            return _HostState.HOST

    elif state == _HostState.HOST:
        if _is_host_char(ch):
            return _HostState.HOST
        if ch == ":":
            return _HostState.HOST_PORT_START

    elif state == _HostState.HOST_V6_END:
        if ch == ":":
            return _HostState.HOST_PORT_START

    elif state in (_HostState.HOST_V6, _HostState.HOST_V6_START):
        if state == _HostState.HOST_V6 and ch == "]":
            return _HostState.HOST_V6_END
        if _is_hex(ch) or ch in ":.":
            return _HostState.HOST_V6
        if state == _HostState.HOST_V6 and ch == "%":
            return _HostState.HOST_V6_ZONE_START

    elif state in (_HostState.HOST_V6_ZONE, _HostState.HOST_V6_ZONE_START):
        if state == _HostState.HOST_V6_ZONE and ch == "]":
            return _HostState.HOST_V6_END
        # RFC 6874 zone id: unreserved / pct-encoded
        if _is_alnum(ch) or ch in "%.-_~":
            return _HostState.HOST_V6_ZONE

    elif state in (_HostState.HOST_PORT, _HostState.HOST_PORT_START):
        if ch.isascii() and ch.isdigit():
            return _HostState.HOST_PORT

    raise URIParseError(ParseErrorKind.INVALID, f"unexpected {ch!r} in authority")


_HOST_PART_OF_STATE = {
    _HostState.USERINFO: "userinfo",
    _HostState.HOST: "host",
    _HostState.HOST_V6: "host",
    _HostState.HOST_V6_ZONE_START: "host",
    _HostState.HOST_V6_ZONE: "host",
    _HostState.HOST_PORT: "port",
}


def _parse_authority(url: Url, authority: str, found_at: bool) -> None:
    state = _HostState.USERINFO_START if found_at else _HostState.HOST_START
    parts: dict[str, list[str]] = {}

    for ch in authority:
        state = _next_host_state(state, ch)
        part = _HOST_PART_OF_STATE.get(state)
        if part is not None:
            parts.setdefault(part, []).append(ch)

    if state not in _ACCEPTING_HOST_STATES:
        raise URIParseError(ParseErrorKind.INVALID, "authority ends unexpectedly")

    url.userinfo = "".join(parts["userinfo"]) if "userinfo" in parts else None
    url.host = "".join(parts["host"]) if "host" in parts else None
    url.port = "".join(parts["port"]) if "port" in parts else None


def parse_url(buf: str) -> Url:
    """
    Parse a URL.

    Raises:
        URIParseError: EmptyInput, Whitespace, NoHost or Invalid
    """
    if not buf:
        raise URIParseError(ParseErrorKind.EMPTY_INPUT)

    url = Url()
    fields: dict[str, str] = {}
    state: Optional[_State] = None
    found_at = False

    current: Optional[str] = None
    start = end = 0

    for i, ch in enumerate(buf):
        if ch.isspace():
            raise URIParseError(ParseErrorKind.WHITESPACE)

        state = _start_state(ch) if i == 0 else _next_state(state, ch)
        if state == _State.SERVER_WITH_AT:
            found_at = True

        field = _FIELD_OF_STATE.get(state)
        if field is None:
            continue

        if field != current:
            if current is not None:
                fields[current] = buf[start:end]
            current = field
            start = i
        end = i + 1

    if current is not None:
        fields[current] = buf[start:end]

    url.scheme = fields.get("scheme")
    url.path = fields.get("path")
    url.query = fields.get("query")
    url.fragment = fields.get("fragment")

    # http:///toto has a scheme but no host
    if url.scheme is not None and "host" not in fields:
        raise URIParseError(ParseErrorKind.NO_HOST)

    if "host" in fields:
        _parse_authority(url, fields["host"], found_at)

    return url


def unparse(part: URIPart) -> str:
    """Canonical text form of a URIPart; parse(unparse(p)) == p."""
    return "".join([
        part.scheme,
        part.sub_domain or "",
        part.host or "",
        part.path or "",
    ])


# ============================================================
# REGISTRY BOUNDARY
# ============================================================

def parse_uri(raw: Union[str, bytes], claim_type: ClaimType) -> URIPart:
    """
    Parse a claimed URI into a URIPart, raising registry errors.

    Errors:
    - BadURI: fewer than 3 bytes
    - ErrorConvertToString: not UTF-8
    - GeneralURINotSupportedYet: rejected by the URL state machine
    - ErrorOnParse: no usable host for the claim type
    """
    raw_bytes = raw.encode("utf-8") if isinstance(raw, str) else raw
    if len(raw_bytes) < MIN_URI_LENGTH:
        raise InvalidInputError(ErrorCode.BAD_URI, f"URI too short: {raw!r}")

    try:
        text = raw_bytes.decode("utf-8")
    except UnicodeDecodeError:
        raise InvalidInputError(ErrorCode.ERROR_CONVERT_TO_STRING, "URI is not valid UTF-8")

    try:
        url = parse_url(text)
    except URIParseError as e:
        raise InvalidInputError(
            ErrorCode.GENERAL_URI_NOT_SUPPORTED_YET,
            f"Cannot parse {text!r}: {e}",
        )

    try:
        return url.convert(claim_type)
    except URIParseError as e:
        raise InvalidInputError(ErrorCode.ERROR_ON_PARSE, f"Cannot convert {text!r}: {e}")
