"""
Canonical Event Schema

Every state transition emits one or more events.

Each event:
- Is appended only if its operation commits
- Is hashed over its canonical payload
- Is chained to the previous event
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


class EventType(str, Enum):
    """
    All signals the registry emits.
    You can add more later, never remove.
    """
    # Request lifecycle
    REGISTER_REQUESTED = "URAuthRegisterRequested"
    REMOVED = "Removed"

    # Oracle quorum
    VERIFICATION_SUBMITTED = "VerificationSubmitted"
    VERIFICATION_INFO = "VerificationInfo"

    # Registry
    TREE_REGISTERED = "URAuthTreeRegistered"
    DOC_UPDATED = "URAuthDocUpdated"
    UPDATE_IN_PROGRESS = "UpdateInProgress"

    # Administration
    URI_BY_ORACLE_ADDED = "URIByOracleAdded"
    URI_BY_ORACLE_REMOVED = "URIByOracleRemoved"
    ORACLE_MEMBER_ADDED = "OracleMemberAdded"
    ORACLE_MEMBER_REMOVED = "OracleMemberRemoved"


class RegistryEvent(BaseModel):
    """
    An emitted, chained event.

    payload is JSON-compatible (no floats, no bytes) so it can be
    canonicalized and hashed.
    """
    sequence_number: int = Field(..., ge=0)
    event_type: EventType
    step: int = Field(
        ...,
        ge=0,
        description="Ledger step the emitting operation ran in"
    )
    payload: dict[str, Any] = Field(default_factory=dict)
    previous_event_hash: Optional[str] = None
    event_hash: str
    created_at: datetime
