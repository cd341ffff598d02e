"""
credstore - Local Credential Store

A single-user password store with a compressed master-credential gate.

Key Features:
- Per-user credential file, rewritten atomically on every change
- Master credentials kept in a Huffman-compressed file
- Scratch files are unique per call and never left behind
- Optional hardened mode: scrypt-hashed master password, AES-256-GCM
  sealed credential file

Components:
- huffman.py: Lossless Huffman file codec
- codec.py: Codec contract, raise-on-failure adapter, scratch files
- models.py: CredentialRecord and MasterCredentialEntry
- storage.py: Credential file and master file persistence
- store.py: In-memory credential list (add/get/has/delete/list)
- auth.py: Authentication gate
- vault.py: Everything above for one user
- crypto.py: Password generation, scrypt, AES-GCM
- cli.py: Command-line interface (uses built-in argparse)

Usage:
    credstore register alice
    credstore add alice github alice-gh
    credstore list alice
"""

from .errors import (
    CodecError,
    CredentialStoreError,
    FileAccessError,
    FilePermissionError,
    InvalidRecordFormat,
    MissingFileError,
    ServiceNotFoundError,
    TamperedFileError,
    UserExistsError,
    VaultLockedError,
    WeakPasswordError,
)
from .models import CredentialRecord, MasterCredentialEntry
from .store import CredentialStore
from .vault import Vault

__version__ = "0.1.0"
