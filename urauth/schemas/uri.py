"""
Canonical URI Schema

A URI is what gets claimed. A URIPart is how the registry reasons about it.

The raw URI string is the map key everywhere (exact equality).
Wildcard semantics exist ONLY at the URIPart layer, where an
oracle-approved pattern is compared against a concrete URI.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


WILDCARD = "*"
DEFAULT_SCHEME = "https"
DEFAULT_SUB_DOMAIN = "www."


class ClaimKind(str, Enum):
    """
    What kind of thing is being claimed.
    Determines root detection and sub-domain splitting.
    """
    DOMAIN = "domain"       # https://www.example.com
    CONTENTS = "contents"   # newnal://file/{cid}


class ClaimType(BaseModel):
    """
    A claim kind plus the dataset description carried by content claims.

    Domain claims ignore the dataset fields.
    """
    kind: ClaimKind = Field(
        default=ClaimKind.DOMAIN,
        description="domain or contents"
    )

    data_source: Optional[str] = Field(
        default=None,
        description="Where the content originally lives (contents only)"
    )

    name: str = Field(
        default="",
        description="Dataset name (contents only)"
    )

    description: str = Field(
        default="",
        description="Dataset description (contents only)"
    )

    @classmethod
    def domain(cls) -> "ClaimType":
        return cls(kind=ClaimKind.DOMAIN)

    @classmethod
    def contents(
        cls,
        name: str = "",
        description: str = "",
        data_source: Optional[str] = None,
    ) -> "ClaimType":
        return cls(
            kind=ClaimKind.CONTENTS,
            name=name,
            description=description,
            data_source=data_source,
        )

    @property
    def is_contents(self) -> bool:
        return self.kind == ClaimKind.CONTENTS


class DataSetMetadata(BaseModel):
    """Name and description stored alongside a registered content claim."""
    name: str
    description: str


class URIPart(BaseModel):
    """
    Structured form of a parsed URI.

    INVARIANTS:
    - scheme is normalized: "http" becomes "https", and "://" is always appended
    - sub_domain, host and path are None when absent (never empty strings
      produced by the parser)

    Use URIPart.new() to build one from raw components; it applies the
    scheme normalization.
    """
    scheme: str = Field(
        ...,
        description="Normalized scheme including '://', e.g. 'https://'"
    )

    sub_domain: Optional[str] = Field(
        default=None,
        description="Sub-domain with trailing dot, e.g. 'sub1.' or 'www.'"
    )

    host: Optional[str] = Field(
        default=None,
        description="Registrable host, or the namespace token for contents"
    )

    path: Optional[str] = Field(
        default=None,
        description="Path including the leading '/'"
    )

    @classmethod
    def new(
        cls,
        scheme: str,
        sub_domain: Optional[str] = None,
        host: Optional[str] = None,
        path: Optional[str] = None,
    ) -> "URIPart":
        if scheme == "http":
            scheme = DEFAULT_SCHEME
        return cls(
            scheme=scheme + "://",
            sub_domain=sub_domain,
            host=host,
            path=path,
        )

    # ================================================================
    # WILDCARD MATCHING
    # self is the concrete URI, pattern is the oracle-approved entry
    # ================================================================

    def matches(self, pattern: "URIPart") -> bool:
        """
        Asymmetric wildcard equality.

        - A '*' anywhere in the pattern scheme matches any scheme.
        - A '*' in the pattern sub-domain matches any run of characters
          at that position.
        - A '*' in the pattern path matches everything from that
          position onward.
        - Host must match exactly.
        - None on both sides is equal; mismatched presence is not.
        """
        if WILDCARD not in pattern.scheme and self.scheme != pattern.scheme:
            return False

        if not _match_optional(self.sub_domain, pattern.sub_domain, _match_sub_domain):
            return False

        if not _match_optional(self.host, pattern.host, _match_exact):
            return False

        return _match_optional(self.path, pattern.path, _match_path)


def _match_optional(value: Optional[str], pattern: Optional[str], matcher) -> bool:
    if value is None and pattern is None:
        return True
    if value is None or pattern is None:
        return False
    return matcher(value, pattern)


def _match_exact(value: str, pattern: str) -> bool:
    return value == pattern


def _match_sub_domain(value: str, pattern: str) -> bool:
    i = pattern.find(WILDCARD)
    if i < 0:
        return value == pattern
    prefix, suffix = pattern[:i], pattern[i + 1:]
    if len(value) < len(prefix) + len(suffix):
        return False
    return value.startswith(prefix) and value.endswith(suffix)


def _match_path(value: str, pattern: str) -> bool:
    if len(value) < len(pattern):
        return False
    i = pattern.find(WILDCARD)
    if i < 0:
        return value == pattern
    return value[:i] == pattern[:i]
