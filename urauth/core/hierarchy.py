"""
URI Hierarchy

Where a URI sits relative to its root, and which registered documents
could vouch for it.

ROOT:
- Domain:   "https://www.example.com" (www sub-domain, no path)
- Contents: "newnal://file/{cid}"     (exactly one '/' in the path)

Every non-root URI has an ordered chain of ancestors, nearest first,
ending at its root. A direct claim walks this chain looking for a
registered ancestor owned by the claimant.
"""

from typing import Optional, Union

from ..schemas import ClaimType, URIPart
from ..schemas.uri import DEFAULT_SUB_DOMAIN
from .errors import ErrorCode, InvalidInputError
from .parser import parse_uri


HTTPS = "https://"
DEFAULT_CONTENT_SCHEME = "newnal"


def _scheme_prefix(part: URIPart) -> str:
    """Non-web schemes are part of the key; https is implied."""
    return "" if part.scheme == HTTPS else part.scheme


def full_uri(part: URIPart) -> str:
    """
    Registry key form of a URI.

    https://www.example.com/a -> example.com/a
    newnal://file/cid         -> newnal://file/cid
    """
    sub = part.sub_domain if part.sub_domain != DEFAULT_SUB_DOMAIN else None
    return "".join([
        _scheme_prefix(part),
        sub or "",
        part.host or "",
        part.path or "",
    ])


def root(part: URIPart) -> Optional[str]:
    if part.host is None:
        return None
    return _scheme_prefix(part) + part.host


def is_root(part: URIPart, claim_type: ClaimType) -> bool:
    if claim_type.is_contents:
        return part.path is not None and part.path.count("/") == 1
    return part.sub_domain == DEFAULT_SUB_DOMAIN and part.path is None


def check_claim_type(
    part: URIPart,
    claim_type: ClaimType,
    content_scheme: str = DEFAULT_CONTENT_SCHEME,
) -> None:
    """
    Raises:
        InvalidInputError(BadClaim): the URI cannot carry this claim type
    """
    if claim_type.is_contents:
        if part.scheme != f"{content_scheme}://":
            raise InvalidInputError(
                ErrorCode.BAD_CLAIM,
                f"Contents must use the {content_scheme}:// scheme, got {part.scheme!r}",
            )
    elif part.host is None:
        raise InvalidInputError(ErrorCode.BAD_CLAIM, "Domain claim has no host")


def ancestors(part: URIPart) -> list[str]:
    """
    Strict ancestors of a parsed URI, nearest first.

    Path segments are stripped right to left down to the bare authority,
    then sub-domain labels left to right down to the host.
    """
    if part.host is None:
        raise InvalidInputError(ErrorCode.ERROR_ON_PARSE, "URI has no host")

    prefix = _scheme_prefix(part)
    sub = part.sub_domain if part.sub_domain != DEFAULT_SUB_DOMAIN else ""
    sub = sub or ""

    result = []

    path = part.path or ""
    while path:
        path = path[:path.rfind("/")]
        result.append(prefix + sub + part.host + path)

    while sub:
        sub = sub[sub.find(".") + 1:]
        result.append(prefix + sub + part.host)

    return result


def parent_uris(raw: Union[str, bytes], claim_type: ClaimType) -> list[str]:
    """
    Ancestor registry keys of a raw URI, nearest first.

    sub2.sub1.website1.com     -> [sub1.website1.com, website1.com]
    website3.com/feed/1/2/3    -> [website3.com/feed/1/2, .../feed/1, .../feed, website3.com]
    newnal://file/cid/1        -> [newnal://file/cid, newnal://file]

    A root URI yields just itself.
    """
    part = parse_uri(raw, claim_type)
    if is_root(part, claim_type):
        return [full_uri(part)]
    return ancestors(part)
