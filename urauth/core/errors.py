"""
Registry Errors

Every failure carries an ErrorCode naming the protocol error, and is raised
as one of four categories:

- InvalidInputError: malformed URI, oversized field, undecodable proof
- AuthorizationError: bad signature, wrong signer, not an owner/member
- ConflictError: already registered, already submitted, field in flight
- NotFoundError: nothing pending or registered under the given key

Errors abort the whole operation. Nothing is retried automatically.
"""

from enum import Enum


class ErrorCode(str, Enum):
    # Input / parse
    BAD_URI = "BadURI"
    BAD_CLAIM = "BadClaim"
    OVER_MAX_SIZE = "OverMaxSize"
    ERROR_CONVERT_TO_STRING = "ErrorConvertToString"
    ERROR_CONVERT_TO_SIGNATURE = "ErrorConvertToSignature"
    ERROR_DECODE_BS58 = "ErrorDecodeBs58"
    ERROR_DECODE_HEX = "ErrorDecodeHex"
    ERROR_ON_PARSE = "ErrorOnParse"
    GENERAL_URI_NOT_SUPPORTED_YET = "GeneralURINotSupportedYet"
    BAD_CHALLENGE_VALUE = "BadChallengeValue"
    CHALLENGE_VALUE_NOT_PROVIDED = "ChallengeValueNotProvided"
    PROOF_MISSING = "ProofMissing"
    OVERFLOW = "Overflow"

    # Authorization
    BAD_PROOF = "BadProof"
    BAD_SIGNER = "BadSigner"
    BAD_ORIGIN = "BadOrigin"
    NOT_ORACLE_MEMBER = "NotOracleMember"
    NOT_URAUTH_DOC_OWNER = "NotURAuthDocOwner"
    NOT_URI_BY_ORACLE = "NotURIByOracle"

    # Conflict
    ALREADY_REGISTERED = "AlreadyRegistered"
    ALREADY_SUBMITTED = "AlreadySubmitted"
    ALREADY_ORACLE_MEMBER = "AlreadyOracleMember"
    MAX_ORACLE_MEMBERS = "MaxOracleMembers"
    MAX_REQUEST = "MaxRequest"
    ERROR_ON_UPDATE_DOC = "ErrorOnUpdateDoc"
    ERROR_ON_UPDATE_DOC_STATUS = "ErrorOnUpdateDocStatus"

    # Missing state
    BAD_REQUEST = "BadRequest"
    CHALLENGE_VALUE_MISSING = "ChallengeValueMissing"
    URAUTH_TREE_NOT_REGISTERED = "URAuthTreeNotRegistered"


class URAuthError(Exception):
    """Base exception for registry errors."""

    def __init__(self, code: ErrorCode, message: str = ""):
        self.code = code
        self.message = message or code.value
        super().__init__(f"{code.value}: {self.message}")


class InvalidInputError(URAuthError):
    """Raised when input cannot be parsed, decoded or bounded."""
    pass


class AuthorizationError(URAuthError):
    """Raised when the caller is not allowed to perform the operation."""
    pass


class ConflictError(URAuthError):
    """Raised when the operation conflicts with existing state."""
    pass


class NotFoundError(URAuthError):
    """Raised when required pending or registered state is absent."""
    pass
