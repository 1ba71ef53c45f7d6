"""
Ownership Request Schema

Pending state for a URI whose ownership has been requested but not yet
verified by the oracle quorum. All of it is ephemeral: it is destroyed on
completion, on a tie, or when the verification window expires.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from .uri import ClaimType


class RequestMetadata(BaseModel):
    """What the claimant asked for, recorded at request time."""
    owner_did: str = Field(
        ...,
        description="DID the document will be owned by"
    )

    challenge_value: str = Field(
        ...,
        description="Challenge the off-chain attestation must echo"
    )

    claim_type: ClaimType

    register_uri: str = Field(
        ...,
        description="Registry key the document will be stored under"
    )


class VerificationResult(str, Enum):
    """Outcome of a single oracle submission."""
    IN_PROGRESS = "InProgress"  # threshold not yet reached
    COMPLETE = "Complete"       # one digest reached the threshold
    TIE = "Tie"                 # everyone voted, nobody won


# ============================================================
# Off-chain challenge envelope
# Field names are bit-exact with what claimants publish.
# ============================================================

class ChallengeProof(BaseModel):
    model_config = ConfigDict(populate_by_name=True, strict=True)

    type: str
    proof_value: str = Field(..., alias="proofValue")


class ChallengeEnvelope(BaseModel):
    """
    The signed JSON document a claimant publishes at their URI.

    {
        "domain": "https://www.example.com",
        "adminDID": "did:infra:ua:...",
        "challenge": "<challenge value>",
        "timestamp": "2024-01-01T00:00:00Z",
        "proof": {"type": "Ed25519Signature2020", "proofValue": "<hex>"}
    }
    """
    model_config = ConfigDict(populate_by_name=True, strict=True)

    domain: str
    admin_did: str = Field(..., alias="adminDID")
    challenge: str
    timestamp: str
    proof: ChallengeProof
