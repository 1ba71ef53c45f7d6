"""
Shared fixtures: identities, a deterministic registry, and a driver that
signs requests, challenges and updates the way a real client would.
"""

import itertools
import json
from dataclasses import dataclass
from typing import Optional

import pytest

from urauth.core import (
    Origin,
    RegistryConfig,
    Signer,
    URAuthRegistry,
    account_to_did,
    apply_update,
    challenge_payload,
    request_payload,
    update_payload,
)
from urauth.db import InMemoryRegistryStore
from urauth.observability import MetricsCollector
from urauth.schemas import ClaimType, MultiSignature, Proof, SignatureScheme


PROOF_TYPES = {
    SignatureScheme.ED25519: "Ed25519Signature2020",
    SignatureScheme.ECDSA: "EcdsaSecp256k1RecoverySignature2020",
}


@dataclass
class Identity:
    """A keypair plus the account and DID derived from it."""
    private_key: str
    account: str
    did: str
    scheme: SignatureScheme

    @classmethod
    def generate(cls, scheme: SignatureScheme = SignatureScheme.ED25519) -> "Identity":
        private_key, account = Signer.generate_keypair(scheme)
        return cls(private_key, account, account_to_did(account), scheme)

    def sign(self, message: bytes) -> MultiSignature:
        return Signer.sign(message, self.private_key, self.scheme)


class Clock:
    """Unix milliseconds, moved by hand."""

    def __init__(self, now: int = 1_700_000_000_000):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int = 1000) -> int:
        self.now += ms
        return self.now


class RegistryDriver:
    """Client-side helper: builds and signs every payload against live nonces."""

    def __init__(self, registry: URAuthRegistry):
        self.registry = registry

    def next_nonce(self, identity: Identity) -> int:
        return self.registry.nonce(identity.account) + 1

    def request(
        self,
        signer: Identity,
        uri: str,
        owner: Optional[Identity] = None,
        claim_type: Optional[ClaimType] = None,
        challenge_value: Optional[str] = None,
    ) -> str:
        owner = owner or signer
        signature = signer.sign(request_payload(uri, owner.did, self.next_nonce(signer)))
        return self.registry.request_register_ownership(
            claim_type=claim_type or ClaimType.domain(),
            uri=uri,
            owner_did=owner.did,
            signer=signer.account,
            signature=signature,
            challenge_value=challenge_value,
        )

    def claim(
        self,
        signer: Identity,
        uri: str,
        owner: Optional[Identity] = None,
        claim_type: Optional[ClaimType] = None,
    ):
        owner = owner or signer
        signature = signer.sign(request_payload(uri, owner.did, self.next_nonce(signer)))
        return self.registry.claim_ownership(
            claim_type=claim_type or ClaimType.domain(),
            uri=uri,
            owner_did=owner.did,
            signer=signer.account,
            signature=signature,
        )

    @staticmethod
    def challenge_json(
        owner: Identity,
        uri: str,
        challenge: str,
        timestamp: str = "2024-01-01T00:00:00Z",
    ) -> str:
        signature = owner.sign(challenge_payload(uri, owner.did, challenge, timestamp))
        return json.dumps({
            "domain": uri,
            "adminDID": owner.did,
            "challenge": challenge,
            "timestamp": timestamp,
            "proof": {"type": PROOF_TYPES[owner.scheme], "proofValue": signature.value},
        })

    def publish(self, owner: Identity, uri: str, timestamp: str = "2024-01-01T00:00:00Z") -> str:
        """Challenge JSON for the stored challenge of a pending request."""
        return self.challenge_json(owner, uri, self.registry.get_challenge(uri), timestamp)

    def update(self, owner: Identity, uri: str, field, updated_at: int):
        doc = self.registry.get_document(uri)
        updated = apply_update(doc, field, updated_at)
        signature = owner.sign(update_payload(uri, updated, owner.did, self.next_nonce(owner)))
        return self.registry.update_document(
            uri=uri,
            field=field,
            updated_at=updated_at,
            proof=Proof(did=owner.did, signature=signature),
        )


@pytest.fixture
def alice():
    return Identity.generate()


@pytest.fixture
def bob():
    return Identity.generate()


@pytest.fixture
def carol():
    return Identity.generate()


@pytest.fixture
def oracles():
    return [Identity.generate() for _ in range(5)]


@pytest.fixture
def clock():
    return Clock()


@pytest.fixture
def config():
    return RegistryConfig()


@pytest.fixture
def registry(config, clock):
    counter = itertools.count(1)
    return URAuthRegistry(
        store=InMemoryRegistryStore(),
        config=config,
        clock=clock,
        challenge_factory=lambda: f"challenge-{next(counter):022d}",
        metrics=MetricsCollector(),
    )


@pytest.fixture
def driver(registry):
    return RegistryDriver(registry)


@pytest.fixture
def with_oracles(registry, oracles):
    """Registry with all five oracle members installed."""
    for member in oracles:
        registry.add_oracle_member(Origin.ROOT, member.account)
    return registry
