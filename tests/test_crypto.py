"""
Tests for canonical encoding, DIDs and signature schemes.

Signing payloads are what clients sign, so their bytes must never drift.
"""

import hashlib
from datetime import datetime, timedelta, timezone

import pytest

from urauth.core import (
    CanonicalSerializationError,
    ErrorCode,
    Hasher,
    InvalidInputError,
    Signer,
    account_to_did,
    blake2_256,
    decode_signature,
    did_to_account,
    request_payload,
    resolve_scheme,
    verify_signature,
)
from urauth.core.did import DID_PREFIX, b58decode, b58encode
from urauth.core.hasher import MAX_RAW_PAYLOAD
from urauth.schemas import MultiSignature, SignatureScheme


class TestHasher:

    def test_sorted_keys(self):
        assert Hasher.canonicalize({"b": 2, "a": 1}) == Hasher.canonicalize({"a": 1, "b": 2})

    def test_version_marker(self):
        assert Hasher.canonicalize({"a": 1}) == '{"__canon_v":1,"a":1}'

    def test_null_omitted_empty_kept(self):
        assert Hasher.canonicalize({"a": 1, "b": None}) == Hasher.canonicalize({"a": 1})
        assert Hasher.canonicalize({"a": ""}) != Hasher.canonicalize({})

    def test_enum_encodes_as_value(self):
        assert Hasher.canonicalize({"s": SignatureScheme.ECDSA}) == '{"__canon_v":1,"s":"ecdsa"}'

    def test_float_rejected(self):
        with pytest.raises(CanonicalSerializationError):
            Hasher.canonicalize({"price": 1.5})

    def test_bytes_rejected(self):
        with pytest.raises(CanonicalSerializationError):
            Hasher.canonicalize({"raw": b"\x00"})

    def test_naive_datetime_rejected(self):
        with pytest.raises(CanonicalSerializationError, match="timezone-naive"):
            Hasher.canonicalize({"t": datetime(2024, 1, 1)})

    def test_datetime_normalized_to_utc(self):
        utc = datetime(2024, 1, 1, 12, tzinfo=timezone.utc)
        plus5 = datetime(2024, 1, 1, 17, tzinfo=timezone(timedelta(hours=5)))
        assert Hasher.canonicalize({"t": utc}) == Hasher.canonicalize({"t": plus5})

    def test_top_level_must_be_object(self):
        with pytest.raises(CanonicalSerializationError):
            Hasher.canonicalize([1, 2])

    def test_short_payload_signed_raw(self):
        payload = Hasher.signing_payload({"a": 1})
        assert payload == b'{"__canon_v":1,"a":1}'

    def test_long_payload_signed_as_digest(self):
        fields = {"uri": "x" * (MAX_RAW_PAYLOAD + 1)}
        payload = Hasher.signing_payload(fields)
        assert len(payload) == 32
        assert payload == blake2_256(Hasher.canonicalize(fields).encode("utf-8"))

    def test_blake2_256(self):
        assert blake2_256(b"abc") == hashlib.blake2b(b"abc", digest_size=32).digest()

    def test_chain_hash_links(self):
        first = Hasher.hash_event({"n": 1})
        second = Hasher.hash_event({"n": 2}, first)
        assert Hasher.verify_chain({"n": 2}, second, first)
        assert not Hasher.verify_chain({"n": 3}, second, first)
        assert not Hasher.verify_chain({"n": 2}, second, None)

    def test_bad_previous_hash_rejected(self):
        with pytest.raises(CanonicalSerializationError):
            Hasher.hash_event({"n": 1}, "not-a-hash")


class TestDid:

    def test_base58_preserves_leading_zeros(self):
        data = b"\x00\x00\x01\x02"
        assert b58decode(b58encode(data)) == data

    def test_did_shape(self):
        did = account_to_did("11" * 32)
        assert did.startswith(DID_PREFIX)
        assert len(did) == len(DID_PREFIX) + 48

    def test_account_recovered(self):
        account = Signer.generate_keypair()[1]
        assert did_to_account(account_to_did(account)) == account

    def test_only_tail_is_decoded(self):
        """Whatever precedes the 48-character tail is ignored."""
        account = "ab" * 32
        tail = account_to_did(account)[-48:]
        assert did_to_account("did:other:method:" + tail) == account

    def test_short_did(self):
        with pytest.raises(InvalidInputError) as exc:
            did_to_account("did:infra:ua:short")
        assert exc.value.code == ErrorCode.BAD_CHALLENGE_VALUE

    def test_bad_base58(self):
        with pytest.raises(InvalidInputError) as exc:
            did_to_account("did:infra:ua:" + "0" * 48)
        assert exc.value.code == ErrorCode.ERROR_DECODE_BS58

    def test_bad_account_hex(self):
        with pytest.raises(InvalidInputError) as exc:
            account_to_did("zz" * 32)
        assert exc.value.code == ErrorCode.ERROR_DECODE_HEX

    def test_wrong_account_length(self):
        with pytest.raises(InvalidInputError) as exc:
            account_to_did("11" * 20)
        assert exc.value.code == ErrorCode.BAD_SIGNER


class TestSigner:

    @pytest.mark.parametrize("scheme", [SignatureScheme.ED25519, SignatureScheme.ECDSA])
    def test_sign_and_verify(self, scheme):
        private_key, account = Signer.generate_keypair(scheme)
        message = request_payload("https://www.example.com", account_to_did(account), 1)
        signature = Signer.sign(message, private_key, scheme)
        assert signature.scheme == scheme
        assert verify_signature(signature, message, account)

    @pytest.mark.parametrize("scheme", [SignatureScheme.ED25519, SignatureScheme.ECDSA])
    def test_wrong_message_fails(self, scheme):
        private_key, account = Signer.generate_keypair(scheme)
        signature = Signer.sign(b"signed", private_key, scheme)
        assert not verify_signature(signature, b"other", account)

    @pytest.mark.parametrize("scheme", [SignatureScheme.ED25519, SignatureScheme.ECDSA])
    def test_wrong_account_fails(self, scheme):
        private_key, _ = Signer.generate_keypair(scheme)
        _, other = Signer.generate_keypair(scheme)
        signature = Signer.sign(b"signed", private_key, scheme)
        assert not verify_signature(signature, b"signed", other)

    def test_ecdsa_account_is_hashed_public_key(self):
        private_key, account = Signer.generate_keypair(SignatureScheme.ECDSA)
        assert len(bytes.fromhex(account)) == 32
        assert Signer.account_of(private_key, SignatureScheme.ECDSA) == account

    def test_ecdsa_signature_is_recoverable_length(self):
        private_key, _ = Signer.generate_keypair(SignatureScheme.ECDSA)
        signature = Signer.sign(b"m", private_key, SignatureScheme.ECDSA)
        assert len(bytes.fromhex(signature.value)) == 65

    def test_non_hex_signature(self):
        with pytest.raises(InvalidInputError) as exc:
            decode_signature(MultiSignature(scheme=SignatureScheme.ED25519, value="xyz"))
        assert exc.value.code == ErrorCode.ERROR_DECODE_HEX

    def test_wrong_length_signature(self):
        with pytest.raises(InvalidInputError) as exc:
            decode_signature(MultiSignature(scheme=SignatureScheme.ED25519, value="00" * 65))
        assert exc.value.code == ErrorCode.ERROR_CONVERT_TO_SIGNATURE

    def test_sr25519_has_no_verifier(self):
        with pytest.raises(InvalidInputError) as exc:
            decode_signature(MultiSignature(scheme=SignatureScheme.SR25519, value="00" * 64))
        assert exc.value.code == ErrorCode.ERROR_CONVERT_TO_SIGNATURE

    def test_sr25519_cannot_generate(self):
        with pytest.raises(InvalidInputError):
            Signer.generate_keypair(SignatureScheme.SR25519)

    @pytest.mark.parametrize("proof_type,scheme", [
        ("Ed25519Signature2020", SignatureScheme.ED25519),
        ("Sr25519Signature2020", SignatureScheme.SR25519),
        ("EcdsaSecp256k1RecoverySignature2020", SignatureScheme.ECDSA),
        ("anything-else", SignatureScheme.ECDSA),
    ])
    def test_resolve_scheme(self, proof_type, scheme):
        assert resolve_scheme(proof_type) == scheme
