"""
Registry Configuration

Bounds and policy knobs for the ownership registry.

Environment Variables:
    URAUTH_VERIFICATION_PERIOD: Steps a request stays pending (default 3)
    URAUTH_MAX_REQUESTS_PER_STEP: Requests that may expire on one step (default 5)
    URAUTH_MAX_ORACLE_MEMBERS: Oracle membership cap (default 5)
    URAUTH_MAX_URI_PATTERNS: Oracle whitelist cap (default 100)
    URAUTH_MAX_URI_SIZE: Bytes allowed in a claimed URI (default 3072)
    URAUTH_MAX_OWNER_DID_SIZE: Bytes allowed in an owner DID (default 64)
    URAUTH_CHALLENGE_RANDOMNESS: Generate challenges server-side (default true)
    URAUTH_CONTENT_SCHEME: Scheme content claims must use (default newnal)
    URAUTH_ORACLE_MEMBERS: Comma-separated accounts installed at startup
"""

import os
from dataclasses import dataclass, field


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    return raw.lower() in ("1", "true", "yes")


@dataclass
class RegistryConfig:
    """Configuration for the ownership registry."""
    verification_period: int = 3
    max_requests_per_step: int = 5
    max_oracle_members: int = 5
    max_uri_patterns: int = 100
    max_uri_size: int = 3072
    max_owner_did_size: int = 64
    challenge_randomness: bool = True
    content_scheme: str = "newnal"
    bootstrap_oracle_members: list[str] = field(default_factory=list)

    @classmethod
    def from_env(cls) -> "RegistryConfig":
        """Load configuration from environment variables."""
        members = os.environ.get("URAUTH_ORACLE_MEMBERS", "")
        return cls(
            verification_period=int(os.environ.get("URAUTH_VERIFICATION_PERIOD", "3")),
            max_requests_per_step=int(os.environ.get("URAUTH_MAX_REQUESTS_PER_STEP", "5")),
            max_oracle_members=int(os.environ.get("URAUTH_MAX_ORACLE_MEMBERS", "5")),
            max_uri_patterns=int(os.environ.get("URAUTH_MAX_URI_PATTERNS", "100")),
            max_uri_size=int(os.environ.get("URAUTH_MAX_URI_SIZE", "3072")),
            max_owner_did_size=int(os.environ.get("URAUTH_MAX_OWNER_DID_SIZE", "64")),
            challenge_randomness=_env_bool("URAUTH_CHALLENGE_RANDOMNESS", True),
            content_scheme=os.environ.get("URAUTH_CONTENT_SCHEME", "newnal"),
            bootstrap_oracle_members=[m.strip().lower() for m in members.split(",") if m.strip()],
        )
