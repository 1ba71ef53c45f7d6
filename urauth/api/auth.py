"""
Admin authentication for the HTTP API.

Administrative commands (oracle membership, URI whitelist, step clock)
require the X-Admin-Token header. The token itself is never stored;
only its Argon2id hash is, in URAUTH_ADMIN_TOKEN_HASH.

Generate a hash with:
    python -m tools.manage hash-admin-token --token <token>

With no hash configured, every admin request is refused.
"""

import os
from typing import Optional

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHash, VerificationError
from fastapi import Header, HTTPException, Request, status

from ..core import Origin
from ..observability import get_logger

logger = get_logger(__name__)

ADMIN_TOKEN_HEADER = "X-Admin-Token"

_hasher = PasswordHasher()


def hash_admin_token(token: str) -> str:
    """Argon2id hash of an admin token (salt and parameters embedded)."""
    return _hasher.hash(token)


def verify_admin_token(token: str, token_hash: str) -> bool:
    try:
        return _hasher.verify(token_hash, token)
    except (VerificationError, InvalidHash):
        return False


def _configured_hash(request: Request) -> Optional[str]:
    # app.state wins so tests and embedders can inject a hash
    configured = getattr(request.app.state, "admin_token_hash", None)
    return configured or os.environ.get("URAUTH_ADMIN_TOKEN_HASH") or None


def require_admin(
    request: Request,
    x_admin_token: Optional[str] = Header(default=None),
) -> Origin:
    """Resolve the caller's origin: ROOT for a valid admin token."""
    token_hash = _configured_hash(request)
    if token_hash is None:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Administration is disabled",
        )

    if not x_admin_token or not verify_admin_token(x_admin_token, token_hash):
        logger.warning(
            "Admin token rejected",
            path=request.url.path,
            client_ip=request.client.host if request.client else None,
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid admin token",
        )

    return Origin.ROOT
