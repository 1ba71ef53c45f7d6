"""
Signature Schemes

Every authorization in the registry is a signature over a canonical
payload, checked against a 32-byte account id.

SCHEMES:
- ed25519: PyNaCl. The account id IS the public key.
- ecdsa:   secp256k1 recoverable signatures (65 bytes) via coincurve,
           message hashed with blake2b-256. The account id is the
           blake2b-256 of the compressed public key.
- sr25519: accepted on the wire, no verifier installed. Rejected.

Verification returns a bool. Malformed signatures raise, because they
are an input error rather than a forged proof.
"""

from abc import ABC, abstractmethod
from typing import Tuple

from coincurve import PrivateKey, PublicKey
from nacl.exceptions import BadSignatureError
from nacl.signing import SigningKey, VerifyKey

from ..schemas import MultiSignature, SignatureScheme
from .errors import ErrorCode, InvalidInputError
from .hasher import blake2_256


class SchemeVerifier(ABC):
    scheme: SignatureScheme
    signature_length: int

    @abstractmethod
    def verify(self, signature: bytes, message: bytes, account: bytes) -> bool:
        ...


class Ed25519Verifier(SchemeVerifier):
    scheme = SignatureScheme.ED25519
    signature_length = 64

    def verify(self, signature: bytes, message: bytes, account: bytes) -> bool:
        try:
            VerifyKey(account).verify(message, signature)
            return True
        except (BadSignatureError, ValueError):
            return False


class EcdsaVerifier(SchemeVerifier):
    scheme = SignatureScheme.ECDSA
    signature_length = 65

    def verify(self, signature: bytes, message: bytes, account: bytes) -> bool:
        try:
            recovered = PublicKey.from_signature_and_message(
                signature, message, hasher=blake2_256
            )
        except ValueError:
            return False
        return blake2_256(recovered.format(compressed=True)) == account


VERIFIERS: dict[SignatureScheme, SchemeVerifier] = {
    SignatureScheme.ED25519: Ed25519Verifier(),
    SignatureScheme.ECDSA: EcdsaVerifier(),
}


def resolve_scheme(proof_type: str) -> SignatureScheme:
    """
    Scheme named by an off-chain proof type, e.g. "Ed25519Signature2020".

    Anything that is neither ed25519 nor sr25519 is treated as ecdsa.
    """
    lowered = proof_type.lower()
    if "ed25519" in lowered:
        return SignatureScheme.ED25519
    if "sr25519" in lowered:
        return SignatureScheme.SR25519
    return SignatureScheme.ECDSA


def decode_signature(signature: MultiSignature) -> Tuple[SchemeVerifier, bytes]:
    """
    Raises:
        InvalidInputError(ErrorDecodeHex): value is not hex
        InvalidInputError(ErrorConvertToSignature): unsupported scheme or wrong length
    """
    try:
        raw = bytes.fromhex(signature.value)
    except ValueError:
        raise InvalidInputError(ErrorCode.ERROR_DECODE_HEX, "Signature is not hex")

    verifier = VERIFIERS.get(signature.scheme)
    if verifier is None:
        raise InvalidInputError(
            ErrorCode.ERROR_CONVERT_TO_SIGNATURE,
            f"No verifier for {signature.scheme.value}",
        )

    if len(raw) != verifier.signature_length:
        raise InvalidInputError(
            ErrorCode.ERROR_CONVERT_TO_SIGNATURE,
            f"{signature.scheme.value} signature must be {verifier.signature_length} bytes",
        )

    return verifier, raw


def verify_signature(signature: MultiSignature, message: bytes, account: str) -> bool:
    """True if `signature` over `message` was produced by `account` (hex)."""
    verifier, raw = decode_signature(signature)
    return verifier.verify(raw, message, bytes.fromhex(account))


class Signer:
    """
    Key generation and signing for claimants, owners and oracles.

    The registry never holds private keys. This exists for clients,
    the management CLI and tests.
    """

    @staticmethod
    def generate_keypair(
        scheme: SignatureScheme = SignatureScheme.ED25519,
    ) -> Tuple[str, str]:
        """
        Returns:
            Tuple of (private_key_hex, account_hex)
        """
        if scheme == SignatureScheme.ED25519:
            private = bytes(SigningKey.generate())
        elif scheme == SignatureScheme.ECDSA:
            private = PrivateKey().secret
        else:
            raise InvalidInputError(
                ErrorCode.ERROR_CONVERT_TO_SIGNATURE,
                f"Cannot generate {scheme.value} keys",
            )
        private_hex = private.hex()
        return private_hex, Signer.account_of(private_hex, scheme)

    @staticmethod
    def account_of(
        private_key_hex: str,
        scheme: SignatureScheme = SignatureScheme.ED25519,
    ) -> str:
        private = bytes.fromhex(private_key_hex)
        if scheme == SignatureScheme.ED25519:
            return bytes(SigningKey(private).verify_key).hex()
        if scheme == SignatureScheme.ECDSA:
            compressed = PrivateKey(private).public_key.format(compressed=True)
            return blake2_256(compressed).hex()
        raise InvalidInputError(
            ErrorCode.ERROR_CONVERT_TO_SIGNATURE,
            f"No account derivation for {scheme.value}",
        )

    @staticmethod
    def sign(
        message: bytes,
        private_key_hex: str,
        scheme: SignatureScheme = SignatureScheme.ED25519,
    ) -> MultiSignature:
        private = bytes.fromhex(private_key_hex)
        if scheme == SignatureScheme.ED25519:
            raw = SigningKey(private).sign(message).signature
        elif scheme == SignatureScheme.ECDSA:
            raw = PrivateKey(private).sign_recoverable(message, hasher=blake2_256)
        else:
            raise InvalidInputError(
                ErrorCode.ERROR_CONVERT_TO_SIGNATURE,
                f"Cannot sign with {scheme.value}",
            )
        return MultiSignature(scheme=scheme, value=raw.hex())
