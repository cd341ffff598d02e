"""
credstore - Vault Module

This file ties the pieces together for one user:
- Registration (adds the user's master entry to the shared master file)
- Unlock (authentication gate, then load the user's credential file)
- Adding/retrieving/deleting credentials, each change saved immediately

Files (all inside the vault directory):
- user_credentials.csv:     compressed master entries, shared by all users
- <username>_passwords.dat: that user's credentials
"""

import logging
from typing import Optional, Tuple

from . import config, crypto, storage
from .auth import AuthenticationGate, AuthState
from .codec import Codec, CodecAdapter
from .errors import (
    InvalidRecordFormat,
    MissingFileError,
    TamperedFileError,
    UserExistsError,
    VaultLockedError,
)
from .models import CredentialRecord, MasterCredentialEntry, check_owner_name
from .store import CredentialListing, CredentialStore, check_password_strength

logger = logging.getLogger(__name__)


class Vault:
    """
    Main vault class - one user's view of the credential store.

    Usage:
        # First run: register a master password
        vault = Vault("alice", directory=vault_dir)
        vault.register("correct horse battery")

        # Later: unlock
        vault = Vault("alice", directory=vault_dir)
        if vault.unlock("correct horse battery"):
            vault.add("github", "alice", "Sup3rSecret!")
            vault.get("github")          # "alice:Sup3rSecret!"
            for service, login, password in vault.list_all():
                ...

    With protect_at_rest=True the master entry is stored as a scrypt hash
    and the credential file is sealed with AES-256-GCM. Without it both
    files hold plaintext.
    """

    def __init__(self, username: str, directory: str = ".",
                 codec: Optional[Codec] = None, protect_at_rest: bool = False):
        """
        Set up paths and the gate (doesn't touch the disk yet).

        Args:
            username: Owner of the credential file
            directory: Where the master and credential files live
            codec: Compression codec for the master file (Huffman by default)
            protect_at_rest: Hash the master password and seal the credential file

        Raises:
            InvalidRecordFormat: Username cannot be used as a file name
        """
        check_owner_name(username)
        self.username = username
        self.directory = directory
        self.protect_at_rest = protect_at_rest
        self.adapter = CodecAdapter(codec)

        self.master_path = storage.master_file_path(directory)
        self.credential_path = storage.credential_file_path(directory, username)

        self.gate = AuthenticationGate(self.master_path, self.adapter)
        self.store: Optional[CredentialStore] = None

        # Only present in hardened mode, after unlock
        self._sealing_key: Optional[crypto.SealingKey] = None

    @property
    def is_unlocked(self) -> bool:
        return self.store is not None

    def register(self, master_password: str) -> None:
        """
        Add this user's master entry, keeping other users' entries.

        Raises:
            WeakPasswordError: Master password too short
            InvalidRecordFormat: Username/password contain ',' or line breaks, or a
                plain password would read back as a scrypt hash
            UserExistsError: Username already registered
            CodecError: Master file could not be (de)compressed
        """
        check_password_strength(master_password)
        # Validate the plaintext form even when a hash is stored
        MasterCredentialEntry(self.username, master_password)
        if not self.protect_at_rest and crypto.is_hashed_master_password(master_password):
            raise InvalidRecordFormat(
                f"Master password cannot start with '{config.MASTER_HASH_SCHEME}$' unless protect_at_rest is set")
        stored = crypto.hash_master_password(master_password) if self.protect_at_rest else master_password
        new_entry = MasterCredentialEntry(self.username, stored)

        try:
            entries = storage.load_master_entries(self.master_path, self.adapter)
        except MissingFileError:
            entries = []

        if any(entry.username == self.username for entry in entries):
            raise UserExistsError(f"User {self.username!r} is already registered")

        storage.save_master_entries(self.master_path, entries + [new_entry], self.adapter)
        logger.info(f"Registered user {self.username!r}")

    def unlock(self, master_password: str) -> bool:
        """
        Authenticate, then load this user's credentials.

        A user with no credential file yet starts with an empty store.

        Returns:
            True if unlocked, False if the credentials did not match

        Raises:
            CodecError: Master file could not be decompressed
            FileAccessError: Master file missing, or credential file unreadable
            InvalidRecordFormat: A stored line is malformed
            TamperedFileError: Sealed credential file cannot be opened
        """
        if self.gate.authenticate(self.username, master_password) is not AuthState.AUTHENTICATED:
            return False

        try:
            blob = storage.read_file(self.credential_path)
        except MissingFileError:
            logger.info(f"No credential file for {self.username!r} yet, starting empty")
            blob = None

        if self.protect_at_rest:
            salt = None
            if blob is not None and crypto.is_sealed(blob):
                try:
                    salt = crypto.sealed_salt(blob)
                except ValueError as e:
                    raise TamperedFileError(f"'{self.credential_path}' has a truncated header") from e
            self._sealing_key = crypto.derive_sealing_key(master_password, salt)

        records = []
        if blob is not None:
            records = storage.decode_records(blob, self.credential_path, self.username, self._sealing_key)

        store = CredentialStore(self.username, persist=self._save)
        store.replace_all(records)
        self.store = store
        logger.info(f"Unlocked vault for {self.username!r} ({len(records)} records)")
        return True

    # =========================================================================
    # CREDENTIAL OPERATIONS
    # =========================================================================

    def add(self, service_name: str, username: str, password: str) -> CredentialRecord:
        """Store a credential (saved before returning)."""
        return self._require_unlocked().add(service_name, username, password)

    def add_generated(self, service_name: str, username: str,
                      length: Optional[int] = None) -> str:
        """
        Generate a password, store it for `service_name`, and return it.

        Raises:
            ValueError: length <= 0
            WeakPasswordError: length too short for the strength policy
        """
        store = self._require_unlocked()
        password = crypto.generate_password(length) if length is not None else crypto.generate_password()
        store.add(service_name, username, password)
        return password

    def delete(self, service_name: str) -> int:
        """Remove every credential for `service_name` (saved before returning)."""
        return self._require_unlocked().delete(service_name)

    def get(self, service_name: str) -> Optional[str]:
        return self._require_unlocked().get(service_name)

    def has(self, service_name: str) -> bool:
        return self._require_unlocked().has(service_name)

    def list_all(self) -> CredentialListing:
        return self._require_unlocked().list_all()

    def records(self) -> Tuple[CredentialRecord, ...]:
        return self._require_unlocked().records()

    # =========================================================================
    # INTERNAL HELPERS
    # =========================================================================

    def _save(self, records) -> None:
        storage.save_credentials(self.credential_path, records, self.username, self._sealing_key)

    def _require_unlocked(self) -> CredentialStore:
        """Check that vault is unlocked."""
        if self.store is None:
            raise VaultLockedError("Vault is locked. Call unlock() first.")
        return self.store
