"""
Admin Routes

Privileged commands. Every endpoint requires a valid X-Admin-Token.

- POST   /api/admin/oracle/members          - Add an oracle member
- DELETE /api/admin/oracle/members/{acc}    - Remove an oracle member
- POST   /api/admin/oracle/uris             - Whitelist a URI pattern
- POST   /api/admin/oracle/uris/remove      - Drop patterns matching a URI
- POST   /api/admin/step                    - Advance the step clock
"""

from typing import Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from ..core import Origin, URAuthRegistry
from ..schemas import ClaimType, URIPart
from .auth import require_admin
from .deps import get_registry


router = APIRouter(prefix="/api/admin", tags=["Admin"])


class OracleMember(BaseModel):
    account: str = Field(..., pattern=r"^[0-9a-f]{64}$")


class URIPattern(BaseModel):
    claim_type: ClaimType = Field(default_factory=ClaimType.domain)
    uri: str


class PatternsRemoved(BaseModel):
    removed: int


class AdvanceStep(BaseModel):
    to_step: Optional[int] = Field(
        default=None,
        ge=0,
        description="Target step; one step forward if omitted",
    )


class StepAdvanced(BaseModel):
    current_step: int
    expired: list[str]


@router.post("/oracle/members", status_code=status.HTTP_201_CREATED, response_model=list[str])
async def add_oracle_member(
    body: OracleMember,
    origin: Origin = Depends(require_admin),
    registry: URAuthRegistry = Depends(get_registry),
):
    registry.add_oracle_member(origin, body.account)
    return registry.oracle_members()


@router.delete("/oracle/members/{account}", response_model=list[str])
async def remove_oracle_member(
    account: str,
    origin: Origin = Depends(require_admin),
    registry: URAuthRegistry = Depends(get_registry),
):
    registry.remove_oracle_member(origin, account)
    return registry.oracle_members()


@router.post("/oracle/uris", status_code=status.HTTP_201_CREATED, response_model=URIPart)
async def add_uri_by_oracle(
    body: URIPattern,
    origin: Origin = Depends(require_admin),
    registry: URAuthRegistry = Depends(get_registry),
):
    return registry.add_uri_by_oracle(origin, body.claim_type, body.uri)


@router.post("/oracle/uris/remove", response_model=PatternsRemoved)
async def remove_uri_by_oracle(
    body: URIPattern,
    origin: Origin = Depends(require_admin),
    registry: URAuthRegistry = Depends(get_registry),
):
    removed = registry.remove_uri_by_oracle(origin, body.claim_type, body.uri)
    return PatternsRemoved(removed=removed)


@router.post("/step", response_model=StepAdvanced)
async def advance_step(
    body: AdvanceStep,
    origin: Origin = Depends(require_admin),
    registry: URAuthRegistry = Depends(get_registry),
):
    """Manual clock drive, for deployments running without the sweeper."""
    target = body.to_step if body.to_step is not None else registry.current_step() + 1
    expired = registry.advance_to(target)
    return StepAdvanced(current_step=registry.current_step(), expired=expired)
