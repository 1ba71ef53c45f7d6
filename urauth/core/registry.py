"""
URAuth Registry - Ownership of URIs

A claimant proves control of a URI to a quorum of oracle members, and the
registry records a document owned by the claimant's account. Afterwards
the document changes only when enough weighted owners sign the change.

LIFECYCLE of a requested URI:

    Unrequested --request--> Pending --quorum--> Registered
                                |
                                +--tie / expiry--> Unrequested

A direct claim skips the quorum: a root URI on the oracle whitelist, or
any URI under a document the claimant already owns.

RULES (enforced in code):
- A registered URI is never registered twice and never deleted
- Only an owner of a registered ancestor may request a URI beneath it
- An account appears at most once among a document's owners
- Every signed operation consumes one nonce of its signer
- At most max_requests_per_step requests expire on the same step
- Only one field of a document may be in flight at a time
- An owner signs a given update round at most once
- Document proofs hold only the signatures of the last committed update

ARCHITECTURE:
- URAuthRegistry: protocol rules, signature checks, event choice
- RegistryStore: atomic state swap and the hash-chained event log

Each public operation runs inside one store transaction. Any error
aborts it, leaving state, nonces and events untouched.
"""

import secrets
import time
from contextlib import contextmanager
from enum import Enum
from typing import Callable, Optional, TYPE_CHECKING, Union

from pydantic import ValidationError

from ..observability import MetricsCollector, get_logger, get_metrics
from ..schemas import (
    AddOwnerField,
    ChallengeEnvelope,
    ClaimType,
    DataSetMetadata,
    EventType,
    MultiDID,
    MultiSignature,
    Proof,
    RegistryEvent,
    RequestMetadata,
    ThresholdField,
    UpdateDocField,
    UpdateDocStatus,
    UpdateState,
    URAuthDoc,
    URIPart,
    VerificationResult,
)
from .config import RegistryConfig
from .did import did_to_account
from .errors import (
    AuthorizationError,
    ConflictError,
    ErrorCode,
    InvalidInputError,
    NotFoundError,
    URAuthError,
)
from .hasher import Hasher
from .hierarchy import ancestors, check_claim_type, full_uri, is_root
from .parser import parse_uri
from .quorum import VerificationSubmission
from .signer import resolve_scheme, verify_signature

if TYPE_CHECKING:
    from ..db.store import RegistryState, RegistryStore, Transaction


logger = get_logger(__name__)

CHALLENGE_LENGTH = 32
NONCE_MAX = 2**64 - 1
DOC_COUNTER_MAX = 2**128 - 1


class Origin(str, Enum):
    """Who is calling. Administration requires ROOT."""
    ROOT = "root"
    SIGNED = "signed"


# ============================================================
# SIGNED PAYLOADS
# Clients build exactly these bytes before signing.
# ============================================================

def request_payload(uri: str, owner_did: str, nonce: int) -> bytes:
    """Signed by a claimant requesting or claiming a URI."""
    return Hasher.signing_payload({
        "kind": "request",
        "uri": uri,
        "owner_did": owner_did,
        "nonce": nonce,
    })


def challenge_payload(uri: str, owner_did: str, challenge: str, timestamp: str) -> bytes:
    """Signed by a claimant inside the challenge JSON they publish."""
    return Hasher.signing_payload({
        "kind": "challenge",
        "uri": uri,
        "owner_did": owner_did,
        "challenge": challenge,
        "timestamp": timestamp,
    })


def update_payload(uri: str, doc: URAuthDoc, owner_did: str, nonce: int) -> bytes:
    """Signed by an owner approving `doc` as the next state of `uri`."""
    return Hasher.signing_payload({
        "kind": "update",
        "uri": uri,
        "doc": doc.signable_fields(),
        "owner_did": owner_did,
        "nonce": nonce,
    })


def apply_update(doc: URAuthDoc, field: UpdateDocField, updated_at: int) -> URAuthDoc:
    """
    Copy of `doc` with `field` applied.

    Raises:
        InvalidInputError(ErrorOnUpdateDoc): threshold above total owner weight,
            or an added owner who already owns the document
    """
    updated = doc.model_copy(deep=True)
    updated.updated_at = updated_at

    if isinstance(field, AddOwnerField):
        account = field.weighted_did.account
        if updated.owners.is_owner(account):
            raise InvalidInputError(
                ErrorCode.ERROR_ON_UPDATE_DOC,
                f"{account} is already an owner",
            )
        updated.owners.dids.append(field.weighted_did.model_copy())
    elif isinstance(field, ThresholdField):
        total = updated.owners.total_weight()
        if field.threshold > total:
            raise InvalidInputError(
                ErrorCode.ERROR_ON_UPDATE_DOC,
                f"Threshold {field.threshold} exceeds total weight {total}",
            )
        updated.owners.threshold = field.threshold
    else:
        # Metadata fields carry a same-named attribute
        setattr(updated, field.field, getattr(field, field.field))

    return updated


class URAuthRegistry:
    """
    The ownership registry.

    Handles the request/verify lifecycle, direct claims, weighted updates,
    expiry and administration. Storage is delegated to a RegistryStore.
    """

    def __init__(
        self,
        store: Optional["RegistryStore"] = None,
        config: Optional[RegistryConfig] = None,
        clock: Optional[Callable[[], int]] = None,
        challenge_factory: Optional[Callable[[], str]] = None,
        metrics: Optional[MetricsCollector] = None,
    ):
        """
        Args:
            store: RegistryStore implementation (in-memory if None)
            config: Registry bounds (loaded from environment if None)
            clock: Returns unix time in milliseconds
            challenge_factory: Returns a fresh 32-character challenge
            metrics: Metrics sink (process-wide collector if None)
        """
        if store is None:
            from ..db.store import InMemoryRegistryStore
            store = InMemoryRegistryStore()

        self._store = store
        self._config = config or RegistryConfig.from_env()
        self._clock = clock or (lambda: int(time.time() * 1000))
        self._challenge_factory = challenge_factory or (lambda: secrets.token_urlsafe(24))
        self._metrics = metrics or get_metrics()

    @property
    def store(self) -> "RegistryStore":
        return self._store

    @property
    def config(self) -> RegistryConfig:
        return self._config

    # ================================================================
    # OPERATION PLUMBING
    # ================================================================

    @contextmanager
    def _operation(self, operation: str, **log_fields):
        """Run one atomic operation with timing, metrics and logging."""
        start = time.perf_counter()
        tx = None
        try:
            with self._store.transaction() as tx:
                yield tx
        except URAuthError as e:
            self._metrics.record_operation(
                operation, (time.perf_counter() - start) * 1000, error_code=e.code.value
            )
            logger.warning(
                f"{operation} rejected: {e.message}",
                operation=operation,
                code=e.code.value,
                **log_fields,
            )
            raise
        else:
            self._metrics.record_operation(
                operation, (time.perf_counter() - start) * 1000, events=len(tx.events)
            )
            logger.info(f"{operation} committed", operation=operation, **log_fields)

    @staticmethod
    def _bound(value: str, limit: int, what: str) -> None:
        if len(value.encode("utf-8")) > limit:
            raise InvalidInputError(ErrorCode.OVER_MAX_SIZE, f"{what} exceeds {limit} bytes")

    @staticmethod
    def _increment_nonce(state: "RegistryState", account: str) -> int:
        nonce = state.nonces.get(account, 0) + 1
        if nonce > NONCE_MAX:
            raise InvalidInputError(ErrorCode.OVERFLOW, f"Nonce overflow for {account}")
        state.nonces[account] = nonce
        return nonce

    @staticmethod
    def _require_proof(signature: MultiSignature, payload: bytes, account: str) -> None:
        if not verify_signature(signature, payload, account):
            raise AuthorizationError(ErrorCode.BAD_PROOF, "Signature does not verify")

    @staticmethod
    def _require_root(origin: Origin) -> None:
        if origin != Origin.ROOT:
            raise AuthorizationError(ErrorCode.BAD_ORIGIN, "Privileged origin required")

    @staticmethod
    def _require_whitelisted(state: "RegistryState", part: URIPart) -> None:
        if not any(part.matches(pattern) for pattern in state.uri_patterns):
            raise AuthorizationError(
                ErrorCode.NOT_URI_BY_ORACLE,
                "URI does not match any oracle-approved pattern",
            )

    @staticmethod
    def _require_ancestor_owner(state: "RegistryState", parents: list[str], signer: str) -> None:
        if not any(
            p in state.documents and state.documents[p].is_owner(signer)
            for p in parents
        ):
            raise AuthorizationError(
                ErrorCode.NOT_URAUTH_DOC_OWNER,
                "Signer owns no registered ancestor",
            )

    def _parse_checked(self, raw: str, claim_type: ClaimType) -> URIPart:
        part = parse_uri(raw, claim_type)
        check_claim_type(part, claim_type, self._config.content_scheme)
        return part

    def _new_document(
        self,
        state: "RegistryState",
        account: str,
        data_source: Optional[str],
    ) -> URAuthDoc:
        if state.counter >= DOC_COUNTER_MAX:
            raise InvalidInputError(ErrorCode.OVERFLOW, "Document counter exhausted")
        doc_id = state.counter.to_bytes(16, "little").hex()
        state.counter += 1

        now = self._clock()
        return URAuthDoc(
            id=doc_id,
            created_at=now,
            updated_at=now,
            owners=MultiDID.single(account),
            data_source=data_source,
        )

    def _register(
        self,
        tx: "Transaction",
        register_uri: str,
        account: str,
        claim_type: ClaimType,
    ) -> URAuthDoc:
        state = tx.state
        data_source = claim_type.data_source if claim_type.is_contents else None
        doc = self._new_document(state, account, data_source)
        state.documents[register_uri] = doc
        if claim_type.is_contents:
            state.datasets[register_uri] = DataSetMetadata(
                name=claim_type.name,
                description=claim_type.description,
            )
        tx.emit(EventType.TREE_REGISTERED, uri=register_uri, doc_id=doc.id, owner=account)
        return doc

    @staticmethod
    def _unschedule(state: "RegistryState", uri: str) -> None:
        for step in list(state.expiry_schedule):
            uris = state.expiry_schedule[step]
            if uri in uris:
                uris.remove(uri)
                if not uris:
                    del state.expiry_schedule[step]

    def _purge(self, tx: "Transaction", uri: str) -> None:
        """Forget everything pending for `uri`."""
        state = tx.state
        state.metadata.pop(uri, None)
        state.challenges.pop(uri, None)
        state.tallies.pop(uri, None)
        self._unschedule(state, uri)
        tx.emit(EventType.REMOVED, uri=uri)

    def _challenge_value(self, provided: Optional[str]) -> str:
        if self._config.challenge_randomness:
            return self._challenge_factory()
        if provided is None:
            raise InvalidInputError(
                ErrorCode.CHALLENGE_VALUE_NOT_PROVIDED,
                "Challenge randomness is disabled; a challenge value is required",
            )
        if not provided.isascii() or len(provided) != CHALLENGE_LENGTH:
            raise InvalidInputError(
                ErrorCode.BAD_CHALLENGE_VALUE,
                f"Challenge must be {CHALLENGE_LENGTH} ASCII characters",
            )
        return provided

    # ================================================================
    # REQUEST LIFECYCLE
    # ================================================================

    def request_register_ownership(
        self,
        claim_type: ClaimType,
        uri: str,
        owner_did: str,
        signer: str,
        signature: MultiSignature,
        challenge_value: Optional[str] = None,
    ) -> str:
        """
        Open a verification window for `uri`.

        Returns:
            The challenge value the claimant must publish
        """
        with self._operation("request_register_ownership", uri=uri, owner_did=owner_did) as tx:
            state = tx.state

            part = self._parse_checked(uri, claim_type)
            check_owner = True
            if not is_root(part, claim_type):
                parents = [p for p in ancestors(part) if p in state.documents]
                if parents:
                    # Under a registered document only its owners may request;
                    # they may name someone else as the new owner
                    self._require_ancestor_owner(state, parents, signer)
                    check_owner = False
                else:
                    self._require_whitelisted(state, part)
            register_uri = full_uri(part)

            if register_uri in state.documents:
                raise ConflictError(ErrorCode.ALREADY_REGISTERED, f"{register_uri} is registered")

            self._bound(uri, self._config.max_uri_size, "URI")
            self._bound(owner_did, self._config.max_owner_did_size, "Owner DID")

            nonce = self._increment_nonce(state, signer)
            if check_owner and did_to_account(owner_did) != signer:
                raise AuthorizationError(ErrorCode.BAD_SIGNER, "Signer does not own the DID")
            self._require_proof(signature, request_payload(uri, owner_did, nonce), signer)

            # A re-request replaces the previous window entirely
            self._unschedule(state, uri)
            state.tallies.pop(uri, None)

            expire = state.current_step + self._config.verification_period
            scheduled = state.expiry_schedule.setdefault(expire, [])
            if len(scheduled) >= self._config.max_requests_per_step:
                raise ConflictError(
                    ErrorCode.MAX_REQUEST,
                    f"Too many requests expiring at step {expire}",
                )
            scheduled.append(uri)

            challenge = self._challenge_value(challenge_value)
            state.challenges[uri] = challenge
            state.metadata[uri] = RequestMetadata(
                owner_did=owner_did,
                challenge_value=challenge,
                claim_type=claim_type,
                register_uri=register_uri,
            )

            tx.emit(EventType.REGISTER_REQUESTED, uri=uri)
            return challenge

    def verify_challenge(
        self,
        member: str,
        challenge_json: Union[str, bytes],
    ) -> VerificationResult:
        """
        Record one oracle member's observation of a published challenge.
        """
        raw = challenge_json.encode("utf-8") if isinstance(challenge_json, str) else challenge_json

        with self._operation("verify_challenge", member=member) as tx:
            state = tx.state

            if member not in state.oracle_members:
                raise AuthorizationError(ErrorCode.NOT_ORACLE_MEMBER, f"{member} is not an oracle")

            try:
                envelope = ChallengeEnvelope.model_validate_json(raw)
            except ValidationError:
                raise InvalidInputError(ErrorCode.BAD_CHALLENGE_VALUE, "Malformed challenge JSON")

            signature = MultiSignature(
                scheme=resolve_scheme(envelope.proof.type),
                value=envelope.proof.proof_value,
            )
            account = did_to_account(envelope.admin_did)
            payload = challenge_payload(
                envelope.domain,
                envelope.admin_did,
                envelope.challenge,
                envelope.timestamp,
            )
            self._require_proof(signature, payload, account)

            uri = envelope.domain
            metadata = state.metadata.get(uri)
            if metadata is None:
                raise NotFoundError(ErrorCode.BAD_REQUEST, f"No pending request for {uri}")
            if did_to_account(metadata.owner_did) != account:
                raise AuthorizationError(ErrorCode.BAD_SIGNER, "Challenge signed by a non-owner")

            stored = state.challenges.get(uri)
            if stored is None:
                raise NotFoundError(ErrorCode.CHALLENGE_VALUE_MISSING, f"No challenge for {uri}")
            if stored != envelope.challenge:
                raise InvalidInputError(ErrorCode.BAD_CHALLENGE_VALUE, "Challenge mismatch")

            digest = Hasher.digest_hex(raw)
            submission = state.tallies.get(uri) or VerificationSubmission()
            result = submission.submit(len(state.oracle_members), member, digest)
            tx.emit(EventType.VERIFICATION_SUBMITTED, member=member, digest=digest)

            if result == VerificationResult.COMPLETE:
                if metadata.register_uri in state.documents:
                    raise ConflictError(
                        ErrorCode.ALREADY_REGISTERED,
                        f"{metadata.register_uri} is registered",
                    )
                self._purge(tx, uri)
                self._register(tx, metadata.register_uri, account, metadata.claim_type)
            elif result == VerificationResult.TIE:
                self._purge(tx, uri)
            else:
                state.tallies[uri] = submission

            tx.emit(EventType.VERIFICATION_INFO, uri=uri, result=result.value)
            return result

    # ================================================================
    # DIRECT CLAIM
    # ================================================================

    def claim_ownership(
        self,
        claim_type: ClaimType,
        uri: str,
        owner_did: str,
        signer: str,
        signature: MultiSignature,
    ) -> URAuthDoc:
        """
        Register `uri` without an oracle round.

        Root URIs must be whitelisted. Anything else must sit under a
        document that `signer` already owns.
        """
        with self._operation("claim_ownership", uri=uri, owner_did=owner_did) as tx:
            state = tx.state

            part = self._parse_checked(uri, claim_type)
            if is_root(part, claim_type):
                self._require_whitelisted(state, part)
                check_owner = True
            else:
                self._require_ancestor_owner(state, ancestors(part), signer)
                # Owning an ancestor is the proof; the DID may name someone else
                check_owner = False
            register_uri = full_uri(part)

            if register_uri in state.documents:
                raise ConflictError(ErrorCode.ALREADY_REGISTERED, f"{register_uri} is registered")

            self._bound(uri, self._config.max_uri_size, "URI")
            self._bound(owner_did, self._config.max_owner_did_size, "Owner DID")

            nonce = self._increment_nonce(state, signer)
            owner = did_to_account(owner_did)
            if check_owner and owner != signer:
                raise AuthorizationError(ErrorCode.BAD_SIGNER, "Signer does not own the DID")
            self._require_proof(signature, request_payload(uri, owner_did, nonce), signer)

            doc = self._register(tx, register_uri, owner, claim_type)
            return doc.model_copy(deep=True)

    # ================================================================
    # WEIGHTED UPDATE
    # ================================================================

    def update_document(
        self,
        uri: str,
        field: UpdateDocField,
        updated_at: int,
        proof: Optional[Proof] = None,
    ) -> UpdateDocStatus:
        """
        Add one owner's signature to the update round for `uri`.

        The update commits once signed weight reaches the document's
        threshold.

        Returns:
            The round's status after this signature (AVAILABLE once committed)
        """
        with self._operation("update_document", uri=uri) as tx:
            state = tx.state

            if proof is None:
                raise InvalidInputError(ErrorCode.PROOF_MISSING, "Update requires a proof")

            doc = state.documents.get(uri)
            if doc is None:
                raise NotFoundError(ErrorCode.URAUTH_TREE_NOT_REGISTERED, f"{uri} is not registered")
            if updated_at < doc.updated_at:
                raise ConflictError(
                    ErrorCode.ERROR_ON_UPDATE_DOC,
                    f"updated_at {updated_at} predates {doc.updated_at}",
                )

            status = state.update_status.get(doc.id)
            if status is None or status.is_available:
                status = UpdateDocStatus(
                    state=UpdateState.IN_PROGRESS,
                    remaining_threshold=doc.threshold,
                    field=field,
                )
            elif status.field != field:
                raise ConflictError(
                    ErrorCode.ERROR_ON_UPDATE_DOC,
                    "A different update is already in progress",
                )

            updated = apply_update(doc, field, updated_at)

            account = did_to_account(proof.did)
            weight = doc.owners.weight_of(account)
            if weight is None:
                raise AuthorizationError(ErrorCode.NOT_URAUTH_DOC_OWNER, "Signer is not an owner")

            nonce = self._increment_nonce(state, account)
            self._require_proof(proof.signature, update_payload(uri, updated, proof.did, nonce), account)

            if any(did_to_account(p.did) == account for p in status.proofs):
                raise ConflictError(
                    ErrorCode.ERROR_ON_UPDATE_DOC_STATUS,
                    "Owner already signed this update",
                )

            status.proofs.append(proof)
            status.remaining_threshold = max(0, status.remaining_threshold - weight)

            if status.remaining_threshold == 0:
                updated.proofs = list(status.proofs)
                state.documents[uri] = updated
                status = UpdateDocStatus()
                state.update_status[doc.id] = status
                tx.emit(EventType.DOC_UPDATED, uri=uri, doc_id=doc.id, field=field.field)
            else:
                state.update_status[doc.id] = status
                tx.emit(
                    EventType.UPDATE_IN_PROGRESS,
                    uri=uri,
                    doc_id=doc.id,
                    remaining_threshold=status.remaining_threshold,
                )

            return status.model_copy(deep=True)

    # ================================================================
    # EXPIRY
    # ================================================================

    def _expire_step(self, tx: "Transaction", step: int) -> list[str]:
        expired = list(tx.state.expiry_schedule.pop(step, []))
        for uri in expired:
            self._purge(tx, uri)
        return expired

    def on_step(self, step: int) -> list[str]:
        """Purge every request scheduled to expire at `step`."""
        with self._operation("on_step", step=step) as tx:
            return self._expire_step(tx, step)

    def advance_to(self, step: int) -> list[str]:
        """
        Move the step clock forward to `step`, expiring as it goes.

        Returns:
            Every URI expired along the way
        """
        expired = []
        while self.current_step() < step:
            with self._operation("advance_step", step=self.current_step() + 1) as tx:
                tx.state.current_step += 1
                expired.extend(self._expire_step(tx, tx.state.current_step))
        return expired

    # ================================================================
    # ADMINISTRATION
    # ================================================================

    def add_oracle_member(self, origin: Origin, account: str) -> None:
        with self._operation("add_oracle_member", member=account) as tx:
            self._require_root(origin)
            members = tx.state.oracle_members
            if account in members:
                raise ConflictError(ErrorCode.ALREADY_ORACLE_MEMBER, f"{account} is already a member")
            if len(members) >= self._config.max_oracle_members:
                raise ConflictError(ErrorCode.MAX_ORACLE_MEMBERS, "Oracle membership is full")
            members.append(account)
            tx.emit(EventType.ORACLE_MEMBER_ADDED, member=account)

    def remove_oracle_member(self, origin: Origin, account: str) -> None:
        with self._operation("remove_oracle_member", member=account) as tx:
            self._require_root(origin)
            if account not in tx.state.oracle_members:
                raise NotFoundError(ErrorCode.NOT_ORACLE_MEMBER, f"{account} is not a member")
            tx.state.oracle_members.remove(account)
            tx.emit(EventType.ORACLE_MEMBER_REMOVED, member=account)

    def add_uri_by_oracle(self, origin: Origin, claim_type: ClaimType, uri: str) -> URIPart:
        """Whitelist a URI pattern. '*' in scheme, sub-domain or path is a wildcard."""
        with self._operation("add_uri_by_oracle", uri=uri) as tx:
            self._require_root(origin)
            part = self._parse_checked(uri, claim_type)
            patterns = tx.state.uri_patterns
            if part not in patterns:
                if len(patterns) >= self._config.max_uri_patterns:
                    raise InvalidInputError(ErrorCode.OVER_MAX_SIZE, "URI whitelist is full")
                patterns.append(part)
            tx.emit(EventType.URI_BY_ORACLE_ADDED, uri=uri)
            return part

    def remove_uri_by_oracle(self, origin: Origin, claim_type: ClaimType, uri: str) -> int:
        """
        Drop every whitelisted pattern that `uri` matches.

        Returns:
            Number of patterns removed
        """
        with self._operation("remove_uri_by_oracle", uri=uri) as tx:
            self._require_root(origin)
            part = parse_uri(uri, claim_type)
            patterns = tx.state.uri_patterns
            if not patterns:
                return 0
            kept = [p for p in patterns if not p.matches(part)]
            removed = len(patterns) - len(kept)
            tx.state.uri_patterns = kept
            tx.emit(EventType.URI_BY_ORACLE_REMOVED, uri=uri)
            return removed

    def bootstrap(self) -> None:
        """Install the configured oracle members that are not yet present."""
        current = set(self.oracle_members())
        for account in self._config.bootstrap_oracle_members:
            if account not in current:
                self.add_oracle_member(Origin.ROOT, account)

    # ================================================================
    # QUERIES
    # ================================================================

    def get_document(self, uri: str) -> Optional[URAuthDoc]:
        doc = self._store.read().documents.get(uri)
        return doc.model_copy(deep=True) if doc else None

    def get_request(self, uri: str) -> Optional[RequestMetadata]:
        metadata = self._store.read().metadata.get(uri)
        return metadata.model_copy(deep=True) if metadata else None

    def get_challenge(self, uri: str) -> Optional[str]:
        return self._store.read().challenges.get(uri)

    def get_verification(self, uri: str) -> Optional[VerificationSubmission]:
        submission = self._store.read().tallies.get(uri)
        return submission.model_copy(deep=True) if submission else None

    def get_update_status(self, doc_id: str) -> UpdateDocStatus:
        status = self._store.read().update_status.get(doc_id)
        return status.model_copy(deep=True) if status else UpdateDocStatus()

    def get_dataset(self, uri: str) -> Optional[DataSetMetadata]:
        dataset = self._store.read().datasets.get(uri)
        return dataset.model_copy() if dataset else None

    def oracle_members(self) -> list[str]:
        return list(self._store.read().oracle_members)

    def uri_patterns(self) -> list[URIPart]:
        return [p.model_copy() for p in self._store.read().uri_patterns]

    def nonce(self, account: str) -> int:
        return self._store.read().nonces.get(account, 0)

    def current_step(self) -> int:
        return self._store.read().current_step

    def expiring_at(self, step: int) -> list[str]:
        return list(self._store.read().expiry_schedule.get(step, []))

    def events(self) -> list[RegistryEvent]:
        return self._store.list_events()
