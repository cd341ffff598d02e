"""
credstore - Authentication Gate

Two states, one transition:

    UNAUTHENTICATED --(master file has a matching entry)--> AUTHENTICATED

There is no way back within a session, and no lockout or rate limiting.
A codec failure while reading the master file raises CodecError and
leaves the state unchanged.
"""

import enum
import logging
from typing import Optional

from . import storage
from .codec import CodecAdapter

logger = logging.getLogger(__name__)


class AuthState(enum.Enum):
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"


class AuthenticationGate:
    """Checks (username, password) against the compressed master file."""

    def __init__(self, master_path: str, adapter: CodecAdapter):
        self.master_path = master_path
        self.adapter = adapter
        self.state = AuthState.UNAUTHENTICATED
        self.username: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.state is AuthState.AUTHENTICATED

    def authenticate(self, username: str, password: str) -> AuthState:
        """
        Try to authenticate and return the resulting state.

        Raises:
            CodecError: Master file could not be decompressed
            FileAccessError: Master file missing or unreadable
            InvalidRecordFormat: Master file contains a malformed line
        """
        if storage.find_master_entry(self.master_path, self.adapter, username, password):
            self.state = AuthState.AUTHENTICATED
            self.username = username
            logger.info(f"Authenticated user {username!r}")
        else:
            logger.warning(f"Authentication failed for user {username!r}")
        return self.state
