"""
Public Query Routes

Read-only views of the registry. URIs contain slashes, so they travel as
a `uri` query parameter rather than a path segment.
"""

from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel

from ..core import URAuthRegistry, VerificationSubmission
from ..schemas import (
    DataSetMetadata,
    RegistryEvent,
    RequestMetadata,
    UpdateDocStatus,
    URAuthDoc,
    URIPart,
)
from .deps import get_registry


router = APIRouter(prefix="/api", tags=["Public API"])


class PendingRequest(BaseModel):
    uri: str
    metadata: RequestMetadata
    challenge: Optional[str] = None
    expires_at_step: Optional[int] = None


class StepInfo(BaseModel):
    current_step: int
    expiring_next: list[str]


class NonceInfo(BaseModel):
    account: str
    nonce: int


def _not_found(what: str, key: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"No {what} for {key}")


@router.get("/documents", response_model=URAuthDoc)
async def get_document(
    uri: str = Query(..., description="Registry key, e.g. example.com/path"),
    registry: URAuthRegistry = Depends(get_registry),
):
    doc = registry.get_document(uri)
    if doc is None:
        raise _not_found("document", uri)
    return doc


@router.get("/datasets", response_model=DataSetMetadata)
async def get_dataset(
    uri: str = Query(...),
    registry: URAuthRegistry = Depends(get_registry),
):
    dataset = registry.get_dataset(uri)
    if dataset is None:
        raise _not_found("dataset", uri)
    return dataset


@router.get("/requests", response_model=PendingRequest)
async def get_request(
    uri: str = Query(..., description="URI exactly as requested"),
    registry: URAuthRegistry = Depends(get_registry),
):
    metadata = registry.get_request(uri)
    if metadata is None:
        raise _not_found("pending request", uri)

    expires_at = None
    state_step = registry.current_step()
    for step in range(state_step, state_step + registry.config.verification_period + 1):
        if uri in registry.expiring_at(step):
            expires_at = step
            break

    return PendingRequest(
        uri=uri,
        metadata=metadata,
        challenge=registry.get_challenge(uri),
        expires_at_step=expires_at,
    )


@router.get("/verifications", response_model=VerificationSubmission)
async def get_verification(
    uri: str = Query(...),
    registry: URAuthRegistry = Depends(get_registry),
):
    submission = registry.get_verification(uri)
    if submission is None:
        raise _not_found("verification round", uri)
    return submission


@router.get("/update-status/{doc_id}", response_model=UpdateDocStatus)
async def get_update_status(
    doc_id: str,
    registry: URAuthRegistry = Depends(get_registry),
):
    return registry.get_update_status(doc_id)


@router.get("/oracle/members", response_model=list[str])
async def list_oracle_members(registry: URAuthRegistry = Depends(get_registry)):
    return registry.oracle_members()


@router.get("/oracle/uris", response_model=list[URIPart])
async def list_uri_patterns(registry: URAuthRegistry = Depends(get_registry)):
    return registry.uri_patterns()


@router.get("/nonces/{account}", response_model=NonceInfo)
async def get_nonce(account: str, registry: URAuthRegistry = Depends(get_registry)):
    return NonceInfo(account=account, nonce=registry.nonce(account))


@router.get("/step", response_model=StepInfo)
async def get_step(registry: URAuthRegistry = Depends(get_registry)):
    current = registry.current_step()
    return StepInfo(current_step=current, expiring_next=registry.expiring_at(current + 1))


@router.get("/events", response_model=list[RegistryEvent])
async def list_events(
    since: int = Query(default=0, ge=0, description="First sequence number to return"),
    limit: int = Query(default=100, ge=1, le=1000),
    registry: URAuthRegistry = Depends(get_registry),
) -> Any:
    events = [e for e in registry.events() if e.sequence_number >= since]
    return events[:limit]
