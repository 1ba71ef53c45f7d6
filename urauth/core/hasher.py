"""
Canonical Encoding and Digests

Two jobs:
1. Turn a payload into exactly one byte string (canonical JSON).
2. Hash those bytes: SHA-256 for the event chain, blake2b-256 for
   everything a signer or an oracle touches.

Any change here invalidates every signature ever produced by clients.
Version the format instead of editing it.

CANONICAL RULES:
1. "__canon_v" version marker injected at the top level
2. Keys sorted recursively, no whitespace, ASCII-escaped output
3. None values omitted; empty strings/lists/dicts kept
4. Enums encode as their value
5. Datetimes must be timezone-aware, encoded as UTC with microseconds
6. Floats, bytes and sets are rejected
7. Top level must be an object

SIGNED PAYLOADS:
A signer signs canonicalize(fields). When that is longer than
MAX_RAW_PAYLOAD bytes, they sign its blake2b-256 digest instead.
"""

import hashlib
import hmac
import json
from datetime import datetime, timezone
from enum import Enum
from typing import Any


MAX_RAW_PAYLOAD = 256


class CanonicalSerializationError(Exception):
    """Raised when data cannot be canonically serialized."""
    pass


def blake2_256(data: bytes) -> bytes:
    """32-byte blake2b digest."""
    return hashlib.blake2b(data, digest_size=32).digest()


class Hasher:
    """Canonical serialization, signing payloads and chain hashes."""

    SERIALIZATION_VERSION = 1

    @classmethod
    def _encode(cls, value: Any, path: str) -> Any:
        if isinstance(value, Enum):
            return value.value

        if value is None or isinstance(value, (str, bool, int)):
            return value

        if isinstance(value, datetime):
            if value.tzinfo is None:
                raise CanonicalSerializationError(
                    f"Datetime at {path} is timezone-naive"
                )
            utc = value.astimezone(timezone.utc)
            return utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc.microsecond:06d}Z"

        if isinstance(value, dict):
            return cls._encode_object(value, path)

        if isinstance(value, (list, tuple)):
            return [cls._encode(v, f"{path}[{i}]") for i, v in enumerate(value)]

        if hasattr(value, "model_dump"):
            return cls._encode_object(value.model_dump(mode="python"), path)

        # floats, bytes, sets and anything unknown have no single encoding
        raise CanonicalSerializationError(
            f"Cannot serialize {type(value).__name__} at {path or '<root>'}"
        )

    @classmethod
    def _encode_object(cls, data: dict[str, Any], path: str) -> dict[str, Any]:
        result = {}
        for key in sorted(data):
            if not isinstance(key, str):
                raise CanonicalSerializationError(
                    f"Key at {path or '<root>'} must be str, got {type(key).__name__}"
                )
            encoded = cls._encode(data[key], f"{path}.{key}" if path else key)
            if encoded is not None:
                result[key] = encoded
        return result

    @classmethod
    def canonicalize(cls, data: Any) -> str:
        """
        Canonical JSON for a dict or pydantic model.

        Raises:
            CanonicalSerializationError: if any value has no canonical form
        """
        if hasattr(data, "model_dump"):
            data = data.model_dump(mode="python")

        if not isinstance(data, dict):
            raise CanonicalSerializationError(
                f"Top-level value must be an object, got {type(data).__name__}"
            )

        canonical = {"__canon_v": cls.SERIALIZATION_VERSION, **cls._encode_object(data, "")}
        return json.dumps(
            canonical,
            sort_keys=True,
            separators=(",", ":"),
            ensure_ascii=True,
            allow_nan=False,
        )

    # ------------------------------------------------------------
    # Signing payloads
    # ------------------------------------------------------------

    @classmethod
    def signing_payload(cls, fields: dict[str, Any]) -> bytes:
        """
        The exact bytes a claimant, oracle or owner signs.

        Long payloads collapse to their 32-byte blake2b digest.
        """
        raw = cls.canonicalize(fields).encode("utf-8")
        if len(raw) > MAX_RAW_PAYLOAD:
            return blake2_256(raw)
        return raw

    @staticmethod
    def digest_hex(raw: bytes) -> str:
        """blake2b-256 of raw bytes, hex. Used to tally oracle submissions."""
        return blake2_256(raw).hex()

    # ------------------------------------------------------------
    # Event chain
    # ------------------------------------------------------------

    @classmethod
    def hash_event(cls, payload: dict[str, Any], previous_hash: str | None = None) -> str:
        """
        SHA-256 of the canonical payload, chained to the previous event.

        Genesis:  SHA256(canonical)
        Chained:  SHA256(previous_hash + ":" + canonical)
        """
        canonical = cls.canonicalize(payload)
        if previous_hash is None:
            chain_input = canonical
        else:
            previous_hash = previous_hash.lower()
            if len(previous_hash) != 64 or any(c not in "0123456789abcdef" for c in previous_hash):
                raise CanonicalSerializationError(
                    f"Invalid previous_hash: {previous_hash!r}"
                )
            chain_input = f"{previous_hash}:{canonical}"
        return hashlib.sha256(chain_input.encode("utf-8")).hexdigest()

    @classmethod
    def verify_chain(
        cls,
        payload: dict[str, Any],
        expected_hash: str,
        previous_hash: str | None = None,
    ) -> bool:
        """True if payload hashes to expected_hash after previous_hash."""
        try:
            computed = cls.hash_event(payload, previous_hash)
        except CanonicalSerializationError:
            return False
        return hmac.compare_digest(computed, expected_hash.lower())
