"""
Registry Store

Holds the registry's state maps and its hash-chained event log.

This module defines the RegistryStore interface and an in-memory
implementation. The store is responsible for:
- Atomicity: every operation runs against a working copy of the state
- Event ordering: sequence numbers and chain linkage are assigned here
- Isolation: one writer at a time

The registry retains responsibility for:
- Protocol rules and error ordering
- Signature verification
- Deciding which events to emit

TRANSACTION CONTRACT:
All mutations MUST go through the transaction() context manager:

    with store.transaction() as tx:
        tx.state.documents[uri] = doc
        tx.emit(EventType.TREE_REGISTERED, uri=uri)

If the block raises, neither the state changes nor the events survive.
"""

import copy
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from threading import Lock
from typing import Any, Callable, Generator, Optional

from ..schemas import (
    DataSetMetadata,
    EventType,
    RegistryEvent,
    RequestMetadata,
    UpdateDocStatus,
    URAuthDoc,
    URIPart,
)
from ..core.hasher import Hasher
from ..core.quorum import VerificationSubmission


# ============================================================
# DATA STRUCTURES
# ============================================================

@dataclass
class RegistryState:
    """
    Every map the registry owns.

    Keys:
    - documents, metadata, challenges, tallies, datasets: registry URI key
    - update_status: document id
    - nonces: account id
    - expiry_schedule: step number -> URIs expiring on that step
    """
    documents: dict[str, URAuthDoc] = field(default_factory=dict)
    metadata: dict[str, RequestMetadata] = field(default_factory=dict)
    challenges: dict[str, str] = field(default_factory=dict)
    tallies: dict[str, VerificationSubmission] = field(default_factory=dict)
    update_status: dict[str, UpdateDocStatus] = field(default_factory=dict)
    oracle_members: list[str] = field(default_factory=list)
    uri_patterns: list[URIPart] = field(default_factory=list)
    expiry_schedule: dict[int, list[str]] = field(default_factory=dict)
    datasets: dict[str, DataSetMetadata] = field(default_factory=dict)
    nonces: dict[str, int] = field(default_factory=dict)
    counter: int = 0
    current_step: int = 0


@dataclass
class ChainHead:
    last_sequence: int  # -1 means no events yet
    last_event_hash: Optional[str]

    @property
    def next_sequence(self) -> int:
        return self.last_sequence + 1


@dataclass
class PendingEvent:
    event_type: EventType
    payload: dict[str, Any]


@dataclass
class Transaction:
    """
    Working copy of the state plus the events it will emit.

    Owned by a single transaction() block. Mutate `state` freely.
    """
    state: RegistryState
    events: list[PendingEvent] = field(default_factory=list)

    def emit(self, event_type: EventType, **payload: Any) -> None:
        # Fail inside the transaction, not at commit, if the payload cannot be hashed
        Hasher.canonicalize(payload)
        self.events.append(PendingEvent(event_type=event_type, payload=payload))


# ============================================================
# ABSTRACT BASE CLASS
# ============================================================

class RegistryStore(ABC):
    """
    Abstract base class for registry storage.

    Implementations must ensure:
    1. A transaction commits state and events together or not at all
    2. No gaps or duplicates in event sequence numbers
    3. Chain linkage is always correct
    """

    @contextmanager
    @abstractmethod
    def transaction(self) -> Generator[Transaction, None, None]:
        """
        Run one atomic operation.

        Yields:
            Transaction whose state is a private working copy
        """
        pass

    @abstractmethod
    def read(self) -> RegistryState:
        """
        Current committed state.

        Callers must treat it as read-only.
        """
        pass

    @abstractmethod
    def list_events(self) -> list[RegistryEvent]:
        """All events ordered by sequence number."""
        pass

    @abstractmethod
    def get_head(self) -> ChainHead:
        pass

    def verify_chain(self) -> bool:
        """Recompute every event hash and check linkage."""
        previous = None
        for event in self.list_events():
            if event.previous_event_hash != previous:
                return False
            if not Hasher.verify_chain(event.payload, event.event_hash, previous):
                return False
            previous = event.event_hash
        return True


# ============================================================
# IN-MEMORY IMPLEMENTATION
# ============================================================

class InMemoryRegistryStore(RegistryStore):
    """
    In-memory implementation of RegistryStore.

    Suitable for development, tests and single-process deployments.
    Nothing survives a restart.
    """

    def __init__(
        self,
        state: Optional[RegistryState] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._state = state or RegistryState()
        self._events: list[RegistryEvent] = []
        self._head = ChainHead(last_sequence=-1, last_event_hash=None)
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._lock = Lock()

    @contextmanager
    def transaction(self) -> Generator[Transaction, None, None]:
        """Serialize writers with a thread lock; swap state in on success."""
        with self._lock:
            tx = Transaction(state=copy.deepcopy(self._state))
            yield tx
            # Reached only when the block did not raise
            self._commit(tx)

    def _commit(self, tx: Transaction) -> None:
        events = []
        head = self._head
        for pending in tx.events:
            event_hash = Hasher.hash_event(pending.payload, head.last_event_hash)
            event = RegistryEvent(
                sequence_number=head.next_sequence,
                event_type=pending.event_type,
                step=tx.state.current_step,
                payload=pending.payload,
                previous_event_hash=head.last_event_hash,
                event_hash=event_hash,
                created_at=self._clock(),
            )
            events.append(event)
            head = ChainHead(last_sequence=event.sequence_number, last_event_hash=event_hash)

        self._state = tx.state
        self._events.extend(events)
        self._head = head

    def read(self) -> RegistryState:
        return self._state

    def list_events(self) -> list[RegistryEvent]:
        return [event.model_copy(deep=True) for event in self._events]

    def get_head(self) -> ChainHead:
        return ChainHead(
            last_sequence=self._head.last_sequence,
            last_event_hash=self._head.last_event_hash,
        )
