"""
Tests for the URI parser and the URIPart wildcard matching.
"""

import pytest

from urauth.core import (
    ErrorCode,
    InvalidInputError,
    ParseErrorKind,
    URIParseError,
    parse_uri,
    parse_url,
    unparse,
)
from urauth.schemas import ClaimType, URIPart


DOMAIN = ClaimType.domain()
CONTENTS = ClaimType.contents()


class TestParseUrl:
    """The character-level state machines."""

    def test_all_components(self):
        """Userinfo, host, port, path, query and fragment are separated."""
        url = parse_url("https://user:pw@sub.example.com:8080/a/b?q=1&r=2#frag")
        assert url.scheme == "https"
        assert url.userinfo == "user:pw"
        assert url.host == "sub.example.com"
        assert url.port == "8080"
        assert url.path == "/a/b"
        assert url.query == "q=1&r=2"
        assert url.fragment == "frag"

    def test_query_may_contain_question_mark(self):
        url = parse_url("https://example.com/p?a=1?b=2")
        assert url.query == "a=1?b=2"

    def test_ipv6_literal_with_port(self):
        url = parse_url("https://[::1]:8080/x")
        assert url.host == "::1"
        assert url.port == "8080"
        assert url.path == "/x"

    def test_ipv6_zone_id(self):
        url = parse_url("http://[fe80::1%25eth0]/")
        assert url.host == "fe80::1%25eth0"

    def test_path_only(self):
        """A bare path parses; it just has no scheme or host."""
        url = parse_url("/foo/bar")
        assert url.scheme is None
        assert url.host is None
        assert url.path == "/foo/bar"

    def test_empty_input(self):
        with pytest.raises(URIParseError) as exc:
            parse_url("")
        assert exc.value.kind == ParseErrorKind.EMPTY_INPUT

    def test_whitespace_rejected(self):
        with pytest.raises(URIParseError) as exc:
            parse_url("https://exa mple.com")
        assert exc.value.kind == ParseErrorKind.WHITESPACE

    def test_scheme_without_host(self):
        with pytest.raises(URIParseError) as exc:
            parse_url("http:///toto")
        assert exc.value.kind == ParseErrorKind.NO_HOST

    def test_repeated_at_rejected(self):
        with pytest.raises(URIParseError) as exc:
            parse_url("https://a@b@example.com")
        assert exc.value.kind == ParseErrorKind.INVALID

    def test_bad_first_character(self):
        with pytest.raises(URIParseError) as exc:
            parse_url("1https://example.com")
        assert exc.value.kind == ParseErrorKind.INVALID

    def test_control_character_rejected(self):
        with pytest.raises(URIParseError):
            parse_url("https://example.com/a\x01b")

    def test_unterminated_ipv6(self):
        with pytest.raises(URIParseError) as exc:
            parse_url("https://[::1/x")
        assert exc.value.kind == ParseErrorKind.INVALID

    def test_port_must_be_numeric(self):
        with pytest.raises(URIParseError):
            parse_url("https://example.com:80a/")


class TestParseUri:
    """The registry boundary: URIPart out, registry errors only."""

    def test_domain_sub_domain_split(self):
        part = parse_uri("https://sub2.sub1.instagram.com/user1/feed", DOMAIN)
        assert part.scheme == "https://"
        assert part.sub_domain == "sub2.sub1."
        assert part.host == "instagram.com"
        assert part.path == "/user1/feed"

    def test_http_normalized_and_www_defaulted(self):
        part = parse_uri("http://instagram.com", DOMAIN)
        assert part.scheme == "https://"
        assert part.sub_domain == "www."
        assert part.host == "instagram.com"
        assert part.path is None

    def test_single_slash_path_dropped(self):
        part = parse_uri("https://www.instagram.com/", DOMAIN)
        assert part.path is None

    def test_other_schemes_kept(self):
        part = parse_uri("ftp://sub2.sub1.www.instagram.com", DOMAIN)
        assert part.scheme == "ftp://"
        assert part.sub_domain == "sub2.sub1.www."

    def test_contents_namespace_host(self):
        part = parse_uri("newnal://file/cid", CONTENTS)
        assert part.scheme == "newnal://"
        assert part.sub_domain is None
        assert part.host == "file"
        assert part.path == "/cid"

    def test_contents_sub_domain(self):
        """Contents split at the last dot, not the second-to-last."""
        part = parse_uri("newnal://sub2.sub1.file/cid", CONTENTS)
        assert part.sub_domain == "sub2.sub1."
        assert part.host == "file"

    def test_bytes_input(self):
        assert parse_uri(b"https://www.example.com", DOMAIN) == parse_uri(
            "https://www.example.com", DOMAIN
        )

    @pytest.mark.parametrize("raw,code", [
        ("ab", ErrorCode.BAD_URI),
        (b"\xff\xfe\xfd", ErrorCode.ERROR_CONVERT_TO_STRING),
        ("https://exa mple.com", ErrorCode.GENERAL_URI_NOT_SUPPORTED_YET),
        ("/foo/bar", ErrorCode.ERROR_ON_PARSE),
    ])
    def test_error_codes(self, raw, code):
        with pytest.raises(InvalidInputError) as exc:
            parse_uri(raw, DOMAIN)
        assert exc.value.code == code

    @pytest.mark.parametrize("raw", [
        "https://sub2.sub1.instagram.com/user1/feed",
        "http://instagram.com",
        "https://www.website1.com",
        "ftp://a.b.example.org/x/y",
    ])
    def test_unparse_round_trip(self, raw):
        """Parsing the canonical text of a URIPart yields the same URIPart."""
        part = parse_uri(raw, DOMAIN)
        assert parse_uri(unparse(part), DOMAIN) == part


class TestWildcardMatching:
    """Concrete URI on the left, whitelist pattern on the right."""

    def test_exact_match(self):
        uri = parse_uri("https://www.website1.com", DOMAIN)
        assert uri.matches(parse_uri("https://www.website1.com", DOMAIN))

    def test_path_wildcard(self):
        pattern = parse_uri("https://website3.com/feed/*", DOMAIN)
        assert parse_uri("https://website3.com/feed/1/2/3", DOMAIN).matches(pattern)
        assert not parse_uri("https://website3.com/user", DOMAIN).matches(pattern)

    def test_path_presence_must_agree(self):
        pattern = parse_uri("https://website2.com/*", DOMAIN)
        assert not parse_uri("https://website2.com", DOMAIN).matches(pattern)

    def test_host_is_exact(self):
        pattern = parse_uri("https://website2.com/*", DOMAIN)
        assert not parse_uri("https://website9.com/user", DOMAIN).matches(pattern)

    def test_sub_domain_wildcard(self):
        pattern = URIPart.new("https", "*.", "website1.com")
        assert parse_uri("https://sub1.website1.com", DOMAIN).matches(pattern)
        assert parse_uri("https://a.b.website1.com", DOMAIN).matches(pattern)

    def test_scheme_wildcard(self):
        pattern = URIPart.new("*", "www.", "website1.com")
        assert parse_uri("ftp://www.website1.com", DOMAIN).matches(pattern)

    def test_matching_is_asymmetric(self):
        uri = parse_uri("https://website3.com/feed/1", DOMAIN)
        pattern = parse_uri("https://website3.com/feed/*", DOMAIN)
        assert uri.matches(pattern)
        assert not pattern.matches(uri)
