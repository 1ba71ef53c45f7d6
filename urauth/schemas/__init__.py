# Canonical Schemas for the URI Ownership Registry
# These define the records the registry stores, signs and emits.

from .uri import (
    ClaimKind,
    ClaimType,
    DataSetMetadata,
    URIPart,
)
from .document import (
    AccessRuleV1,
    AccessRulesField,
    AddOwnerField,
    Asset,
    ContentAddress,
    ContentMetadataField,
    ContentMetadataV1,
    ContentType,
    CopyrightInfo,
    CopyrightInfoField,
    CopyrightInfoV1,
    CopyrightText,
    IdentityInfoField,
    IdentityInfoV1,
    MultiDID,
    MultiSignature,
    Price,
    PriceUnit,
    Proof,
    Rule,
    SignatureScheme,
    StorageProvider,
    ThresholdField,
    UpdateDocField,
    UpdateDocStatus,
    UpdateState,
    URAuthDoc,
    WeightedDID,
)
from .request import (
    ChallengeEnvelope,
    ChallengeProof,
    RequestMetadata,
    VerificationResult,
)
from .events import EventType, RegistryEvent

__all__ = [
    # URI
    "ClaimKind",
    "ClaimType",
    "DataSetMetadata",
    "URIPart",
    # Document
    "AccessRuleV1",
    "AccessRulesField",
    "AddOwnerField",
    "Asset",
    "ContentAddress",
    "ContentMetadataField",
    "ContentMetadataV1",
    "ContentType",
    "CopyrightInfo",
    "CopyrightInfoField",
    "CopyrightInfoV1",
    "CopyrightText",
    "IdentityInfoField",
    "IdentityInfoV1",
    "MultiDID",
    "MultiSignature",
    "Price",
    "PriceUnit",
    "Proof",
    "Rule",
    "SignatureScheme",
    "StorageProvider",
    "ThresholdField",
    "UpdateDocField",
    "UpdateDocStatus",
    "UpdateState",
    "URAuthDoc",
    "WeightedDID",
    # Request
    "ChallengeEnvelope",
    "ChallengeProof",
    "RequestMetadata",
    "VerificationResult",
    # Events
    "EventType",
    "RegistryEvent",
]
