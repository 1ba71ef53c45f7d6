"""
Claimant, Oracle and Owner Commands

Command-style endpoints. Every body carries its own signature; the HTTP
caller is not trusted with anything the signature does not prove.

- POST /api/requests        - Request ownership of a URI (claimant)
- POST /api/verifications   - Submit an observed challenge (oracle member)
- POST /api/claims          - Claim a URI directly (claimant)
- POST /api/updates         - Sign a document update (owner)
"""

from typing import Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from ..core import (
    AuthorizationError,
    ErrorCode,
    URAuthRegistry,
    verify_signature,
)
from ..schemas import (
    ClaimType,
    MultiSignature,
    Proof,
    UpdateDocField,
    UpdateDocStatus,
    URAuthDoc,
    VerificationResult,
)
from .deps import get_registry


router = APIRouter(prefix="/api", tags=["Commands"])

ACCOUNT_PATTERN = r"^[0-9a-f]{64}$"


# ============================================================
# Request/Response Models
# ============================================================

class OwnershipRequest(BaseModel):
    claim_type: ClaimType = Field(default_factory=ClaimType.domain)
    uri: str
    owner_did: str
    signer: str = Field(..., pattern=ACCOUNT_PATTERN, description="Signer account id (hex)")
    signature: MultiSignature
    challenge_value: Optional[str] = None


class OwnershipRequestResponse(BaseModel):
    uri: str
    challenge_value: str


class ChallengeSubmission(BaseModel):
    member: str = Field(..., pattern=ACCOUNT_PATTERN, description="Oracle member account id (hex)")
    challenge_json: str = Field(..., description="Challenge JSON exactly as published")
    member_signature: MultiSignature = Field(
        ...,
        description="Member's signature over the UTF-8 bytes of challenge_json",
    )


class ChallengeSubmissionResponse(BaseModel):
    result: VerificationResult


class DirectClaim(BaseModel):
    claim_type: ClaimType = Field(default_factory=ClaimType.domain)
    uri: str
    owner_did: str
    signer: str = Field(..., pattern=ACCOUNT_PATTERN)
    signature: MultiSignature


class DocumentUpdate(BaseModel):
    uri: str
    field: UpdateDocField
    updated_at: int = Field(..., ge=0, description="Unix milliseconds")
    proof: Optional[Proof] = None


# ============================================================
# Command Endpoints
# ============================================================

@router.post(
    "/requests",
    response_model=OwnershipRequestResponse,
    status_code=status.HTTP_201_CREATED,
)
async def request_ownership(
    body: OwnershipRequest,
    registry: URAuthRegistry = Depends(get_registry),
):
    """
    Open a verification window. Publish the returned challenge at the
    URI, signed by the owner DID, for the oracles to observe.
    """
    challenge = registry.request_register_ownership(
        claim_type=body.claim_type,
        uri=body.uri,
        owner_did=body.owner_did,
        signer=body.signer,
        signature=body.signature,
        challenge_value=body.challenge_value,
    )
    return OwnershipRequestResponse(uri=body.uri, challenge_value=challenge)


@router.post("/verifications", response_model=ChallengeSubmissionResponse)
async def submit_verification(
    body: ChallengeSubmission,
    registry: URAuthRegistry = Depends(get_registry),
):
    raw = body.challenge_json.encode("utf-8")
    if not verify_signature(body.member_signature, raw, body.member):
        raise AuthorizationError(ErrorCode.BAD_PROOF, "Member signature does not verify")

    result = registry.verify_challenge(body.member, raw)
    return ChallengeSubmissionResponse(result=result)


@router.post(
    "/claims",
    response_model=URAuthDoc,
    status_code=status.HTTP_201_CREATED,
)
async def claim_ownership(
    body: DirectClaim,
    registry: URAuthRegistry = Depends(get_registry),
):
    return registry.claim_ownership(
        claim_type=body.claim_type,
        uri=body.uri,
        owner_did=body.owner_did,
        signer=body.signer,
        signature=body.signature,
    )


@router.post("/updates", response_model=UpdateDocStatus)
async def update_document(
    body: DocumentUpdate,
    registry: URAuthRegistry = Depends(get_registry),
):
    """Returns the round status; AVAILABLE means the update committed."""
    return registry.update_document(
        uri=body.uri,
        field=body.field,
        updated_at=body.updated_at,
        proof=body.proof,
    )
