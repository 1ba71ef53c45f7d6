# Core registry services
from .errors import (
    AuthorizationError,
    ConflictError,
    ErrorCode,
    InvalidInputError,
    NotFoundError,
    URAuthError,
)
from .hasher import Hasher, CanonicalSerializationError, blake2_256
from .parser import ParseErrorKind, URIParseError, Url, parse_uri, parse_url, unparse
from .hierarchy import ancestors, check_claim_type, full_uri, is_root, parent_uris, root
from .did import account_to_did, did_to_account
from .signer import Signer, decode_signature, resolve_scheme, verify_signature
from .quorum import VerificationSubmission, quorum_threshold
from .config import RegistryConfig
from .registry import (
    Origin,
    URAuthRegistry,
    apply_update,
    challenge_payload,
    request_payload,
    update_payload,
)
from .sweeper import ExpirySweeper, SweeperConfig

__all__ = [
    "AuthorizationError",
    "ConflictError",
    "ErrorCode",
    "InvalidInputError",
    "NotFoundError",
    "URAuthError",
    "Hasher",
    "CanonicalSerializationError",
    "blake2_256",
    "ParseErrorKind",
    "URIParseError",
    "Url",
    "parse_uri",
    "parse_url",
    "unparse",
    "ancestors",
    "check_claim_type",
    "full_uri",
    "is_root",
    "parent_uris",
    "root",
    "account_to_did",
    "did_to_account",
    "Signer",
    "decode_signature",
    "resolve_scheme",
    "verify_signature",
    "VerificationSubmission",
    "quorum_threshold",
    "RegistryConfig",
    "Origin",
    "URAuthRegistry",
    "apply_update",
    "challenge_payload",
    "request_payload",
    "update_payload",
    "ExpirySweeper",
    "SweeperConfig",
]
