"""
credstore - Credential Store

In-memory, ordered list of CredentialRecords for one owner.

Service names are NOT unique here: add() appends even when the name
exists, get()/has() see the first match, delete() removes every match.
Each mutation is handed to the persist callback before the in-memory list
changes, so a failed save leaves the store exactly as it was.
"""

import logging
from typing import Callable, Iterable, Iterator, List, Optional, Tuple

from . import config
from .errors import ServiceNotFoundError, WeakPasswordError
from .models import CredentialRecord

logger = logging.getLogger(__name__)

PersistCallback = Callable[[List[CredentialRecord]], None]


def check_password_strength(password: str) -> None:
    """
    Raises:
        WeakPasswordError: If the password is not strictly longer than MIN_PASSWORD_LENGTH
    """
    if len(password) <= config.MIN_PASSWORD_LENGTH:
        raise WeakPasswordError(
            f"Password is too weak! It must be longer than {config.MIN_PASSWORD_LENGTH} characters."
        )


class CredentialListing:
    """
    Lazy view of (service_name, username, password) triples.

    Built over a snapshot of the records, so it can be iterated any number
    of times and never reflects later mutations.
    """

    def __init__(self, records: Tuple[CredentialRecord, ...]):
        self._records = records

    def __iter__(self) -> Iterator[Tuple[str, str, str]]:
        for record in self._records:
            username, password = record.split()
            yield record.service_name, username, password

    def __len__(self) -> int:
        return len(self._records)


class CredentialStore:
    """
    Usage:
        store = CredentialStore("alice", persist=save_fn)
        store.add("github", "alice", "Sup3rSecret!")
        store.get("github")        # "alice:Sup3rSecret!"
        store.delete("github")
    """

    def __init__(self, owner: str, persist: Optional[PersistCallback] = None):
        self.owner = owner
        self._persist = persist
        self._records: List[CredentialRecord] = []

    # =========================================================================
    # Mutations (flushed before returning)
    # =========================================================================

    def add(self, service_name: str, username: str, password: str) -> CredentialRecord:
        """
        Append a record and persist it.

        Raises:
            WeakPasswordError: Password too short
            InvalidRecordFormat: Fields cannot be stored in the line format
        """
        check_password_strength(password)
        record = CredentialRecord.pack(service_name, username, password)
        self._commit(self._records + [record])
        logger.debug(f"Added record for service {service_name!r}")
        return record

    def delete(self, service_name: str) -> int:
        """
        Remove every record for `service_name` and persist.

        Returns:
            Number of records removed

        Raises:
            ServiceNotFoundError: No record matched
        """
        remaining = [r for r in self._records if r.service_name != service_name]
        removed = len(self._records) - len(remaining)
        if not removed:
            raise ServiceNotFoundError(service_name)
        self._commit(remaining)
        logger.debug(f"Deleted {removed} record(s) for service {service_name!r}")
        return removed

    def replace_all(self, records: Iterable[CredentialRecord]) -> None:
        """Load records without persisting (used right after reading the file)."""
        self._records = list(records)

    # =========================================================================
    # Reads
    # =========================================================================

    def get(self, service_name: str) -> Optional[str]:
        """Payload ("username:password") of the first match, or None."""
        for record in self._records:
            if record.service_name == service_name:
                return record.secret_payload
        return None

    def has(self, service_name: str) -> bool:
        return any(record.service_name == service_name for record in self._records)

    def list_all(self) -> CredentialListing:
        return CredentialListing(tuple(self._records))

    def records(self) -> Tuple[CredentialRecord, ...]:
        return tuple(self._records)

    def __len__(self) -> int:
        return len(self._records)

    # =========================================================================
    # INTERNAL HELPERS
    # =========================================================================

    def _commit(self, records: List[CredentialRecord]) -> None:
        if self._persist is not None:
            self._persist(list(records))
        self._records = records
