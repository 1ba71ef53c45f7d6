"""
DID Codec

Owner DIDs look like:

    did:infra:ua:<ss58>

where <ss58> is the base58 encoding of

    [network prefix (1 byte)] [account id (32 bytes)] [checksum (2 bytes)]

and always 48 characters long. Only the trailing 48 characters matter when
decoding; whatever precedes them is the DID method and is not checked.

The checksum is written but not verified on decode.
"""

import hashlib

from .errors import ErrorCode, InvalidInputError


DID_PREFIX = "did:infra:ua:"
SS58_PREFIX = 42
SS58_LENGTH = 48
ACCOUNT_LENGTH = 32

_SS58_CONTEXT = b"SS58PRE"

# Base58 implementation (no external deps)
B58_ALPHABET = b"123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"
B58_MAP = {c: i for i, c in enumerate(B58_ALPHABET)}


def b58decode(s: str) -> bytes:
    s_bytes = s.encode("ascii") if isinstance(s, str) else s
    num = 0
    for c in s_bytes:
        if c not in B58_MAP:
            raise ValueError("Invalid base58 character")
        num = num * 58 + B58_MAP[c]
    n_pad = len(s_bytes) - len(s_bytes.lstrip(B58_ALPHABET[:1]))
    full = num.to_bytes((num.bit_length() + 7) // 8, "big") if num else b""
    return b"\x00" * n_pad + full


def b58encode(b: bytes) -> str:
    n_pad = len(b) - len(b.lstrip(b"\x00"))
    num = int.from_bytes(b, "big")
    out = bytearray()
    while num > 0:
        num, rem = divmod(num, 58)
        out.append(B58_ALPHABET[rem])
    out.extend(B58_ALPHABET[:1] * n_pad)
    out.reverse()
    return out.decode("ascii")


def _checksum(body: bytes) -> bytes:
    return hashlib.blake2b(_SS58_CONTEXT + body, digest_size=64).digest()[:2]


def ss58_encode(account: bytes, prefix: int = SS58_PREFIX) -> str:
    body = bytes([prefix]) + account
    return b58encode(body + _checksum(body))


def account_to_did(account: str) -> str:
    """Hex account id -> did:infra:ua:<ss58>."""
    try:
        raw = bytes.fromhex(account)
    except ValueError:
        raise InvalidInputError(ErrorCode.ERROR_DECODE_HEX, f"Account is not hex: {account!r}")
    if len(raw) != ACCOUNT_LENGTH:
        raise InvalidInputError(ErrorCode.BAD_SIGNER, "Account must be 32 bytes")
    return DID_PREFIX + ss58_encode(raw)


def did_to_account(owner_did: str) -> str:
    """
    Account id (hex) encoded in the trailing 48 characters of a DID.

    Raises:
        InvalidInputError(BadChallengeValue): DID shorter than 48 characters
        InvalidInputError(ErrorDecodeBs58): tail is not base58 of the right size
    """
    if len(owner_did) < SS58_LENGTH:
        raise InvalidInputError(
            ErrorCode.BAD_CHALLENGE_VALUE,
            f"DID too short: {owner_did!r}",
        )

    try:
        decoded = b58decode(owner_did[-SS58_LENGTH:])
    except ValueError:
        raise InvalidInputError(ErrorCode.ERROR_DECODE_BS58, f"Bad base58 in {owner_did!r}")

    if len(decoded) < 1 + ACCOUNT_LENGTH:
        raise InvalidInputError(ErrorCode.ERROR_DECODE_BS58, f"DID payload too short: {owner_did!r}")

    return decoded[1:1 + ACCOUNT_LENGTH].hex()
