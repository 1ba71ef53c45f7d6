"""
Canonical Document Schema

A URAuthDoc is what a registered URI owns.

It is created only by a completed ownership claim and mutated only by the
weighted update workflow. It is never deleted.

OWNERSHIP:
- owners is a MultiDID: weighted accounts plus a threshold
- sum(weights) >= threshold must hold whenever the threshold changes
- proofs holds ONLY the signatures of the most recently committed update
"""

from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field


U16_MAX = 65_535


class SignatureScheme(str, Enum):
    """Signature algorithms a proof may be produced with."""
    ED25519 = "ed25519"
    SR25519 = "sr25519"
    ECDSA = "ecdsa"


class MultiSignature(BaseModel):
    """A signature tagged with the scheme that produced it."""
    scheme: SignatureScheme
    value: str = Field(
        ...,
        description="Hex-encoded raw signature bytes"
    )


class Proof(BaseModel):
    """An owner's authorization of a document state."""
    did: str = Field(
        ...,
        description="Owner DID whose account produced the signature"
    )
    signature: MultiSignature


# ============================================================
# Ownership
# ============================================================

class WeightedDID(BaseModel):
    """An owner account with its voting weight."""
    account: str = Field(
        ...,
        description="Account id (64 lowercase hex chars)"
    )
    weight: int = Field(
        ...,
        ge=0,
        le=U16_MAX,
    )


class MultiDID(BaseModel):
    """
    Owners of a document.

    Any update must be authorized by owners whose weights sum to at
    least the threshold.
    """
    dids: list[WeightedDID] = Field(default_factory=list)
    threshold: int = Field(
        default=1,
        ge=0,
        le=U16_MAX,
    )

    @classmethod
    def single(cls, account: str, weight: int = 1) -> "MultiDID":
        return cls(dids=[WeightedDID(account=account, weight=weight)], threshold=weight)

    def is_owner(self, account: str) -> bool:
        return any(d.account == account for d in self.dids)

    def weight_of(self, account: str) -> Optional[int]:
        for d in self.dids:
            if d.account == account:
                return d.weight
        return None

    def total_weight(self) -> int:
        return sum(d.weight for d in self.dids)


# ============================================================
# Document metadata
# ============================================================

class StorageProvider(str, Enum):
    IPFS = "IPFS"


class ContentAddress(BaseModel):
    storage_provider: StorageProvider = StorageProvider.IPFS
    cid: str


class IdentityInfoV1(BaseModel):
    """A verifiable credential attesting the owner's identity."""
    version: Literal["v1"] = "v1"
    vc: str


class ContentMetadataV1(BaseModel):
    version: Literal["v1"] = "v1"
    content_address: ContentAddress


class CopyrightText(BaseModel):
    kind: Literal["text"] = "text"
    text: str


class CopyrightInfoV1(BaseModel):
    kind: Literal["v1"] = "v1"
    content_address: ContentAddress


CopyrightInfo = Annotated[
    Union[CopyrightText, CopyrightInfoV1],
    Field(discriminator="kind"),
]


class ContentType(str, Enum):
    ALL = "All"
    IMAGE = "Image"
    VIDEO = "Video"
    TEXT = "Text"
    CODE = "Code"


class PriceUnit(str, Enum):
    USD_PER_MB = "USDPerMb"
    KRW_PER_MB = "KRWPerMb"


class Price(BaseModel):
    """
    Fixed-point price: value = price / 10**decimals.
    Integers only - floats never enter canonical payloads.
    """
    price: int = Field(..., ge=0)
    decimals: int = Field(default=0, ge=0, le=255)
    unit: PriceUnit = PriceUnit.USD_PER_MB


class Rule(BaseModel):
    """Which crawlers may take which content, and at what price."""
    user_agents: list[str] = Field(default_factory=list)
    allow: list[tuple[ContentType, Price]] = Field(default_factory=list)
    disallow: list[ContentType] = Field(default_factory=list)


class AccessRuleV1(BaseModel):
    version: Literal["v1"] = "v1"
    path: str
    rules: list[Rule] = Field(default_factory=list)


class Asset(BaseModel):
    """Opaque asset descriptor attached to a document."""
    asset_id: str
    amount: int = Field(default=0, ge=0)


# ============================================================
# The document
# ============================================================

class URAuthDoc(BaseModel):
    """
    The owned record for a registered URI.

    Timestamps are unix milliseconds.
    """
    id: str = Field(
        ...,
        description="16-byte document id, hex encoded"
    )
    created_at: int = Field(..., ge=0)
    updated_at: int = Field(..., ge=0)
    owners: MultiDID

    identity_info: Optional[list[IdentityInfoV1]] = None
    content_metadata: Optional[ContentMetadataV1] = None
    copyright_info: Optional[CopyrightInfo] = None
    access_rules: Optional[list[AccessRuleV1]] = None
    asset: Optional[Asset] = None
    data_source: Optional[str] = None

    proofs: Optional[list[Proof]] = None

    def is_owner(self, account: str) -> bool:
        return self.owners.is_owner(account)

    @property
    def threshold(self) -> int:
        return self.owners.threshold

    def signable_fields(self) -> dict:
        """Every field except proofs, in JSON-compatible form."""
        return self.model_dump(mode="json", exclude={"proofs"})


# ============================================================
# Update workflow
# Exactly one field may be in flight per document.
# ============================================================

class AddOwnerField(BaseModel):
    field: Literal["multi_did"] = "multi_did"
    weighted_did: WeightedDID


class ThresholdField(BaseModel):
    field: Literal["threshold"] = "threshold"
    threshold: int = Field(..., ge=0, le=U16_MAX)


class IdentityInfoField(BaseModel):
    field: Literal["identity_info"] = "identity_info"
    identity_info: Optional[list[IdentityInfoV1]] = None


class ContentMetadataField(BaseModel):
    field: Literal["content_metadata"] = "content_metadata"
    content_metadata: Optional[ContentMetadataV1] = None


class CopyrightInfoField(BaseModel):
    field: Literal["copyright_info"] = "copyright_info"
    copyright_info: Optional[CopyrightInfo] = None


class AccessRulesField(BaseModel):
    field: Literal["access_rules"] = "access_rules"
    access_rules: Optional[list[AccessRuleV1]] = None


UpdateDocField = Annotated[
    Union[
        AddOwnerField,
        ThresholdField,
        IdentityInfoField,
        ContentMetadataField,
        CopyrightInfoField,
        AccessRulesField,
    ],
    Field(discriminator="field"),
]


class UpdateState(str, Enum):
    AVAILABLE = "available"
    IN_PROGRESS = "in_progress"


class UpdateDocStatus(BaseModel):
    """
    Per-document update round.

    While IN_PROGRESS, `field` is the mutation being voted on and
    `proofs` holds every signature collected this round.
    """
    state: UpdateState = UpdateState.AVAILABLE
    remaining_threshold: int = Field(default=0, ge=0)
    field: Optional[UpdateDocField] = None
    proofs: list[Proof] = Field(default_factory=list)

    @property
    def is_available(self) -> bool:
        return self.state == UpdateState.AVAILABLE
