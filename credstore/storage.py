"""
credstore - Persistence Layer

Two independent files:

Per-user credential file (<username>_passwords.dat)
    Plain text, one record per line: "service_name username:password".
    Every save rewrites the whole file through a temp file in the same
    directory followed by os.replace(), so a crash leaves either the old
    or the new file, never a half-written one. In hardened mode the same
    text is sealed with AES-256-GCM (see crypto.seal).

Master credential file (user_credentials.csv)
    Codec-compressed "username,password" lines.
    save: entries -> scratch text -> compress -> scratch blob -> os.replace
    load: decompress -> scratch text -> parse -> scratch removed
    Scratch files never outlive the call (codec.scratch_file).
"""

import logging
import os
import tempfile
from typing import Iterable, List, Optional

from cryptography.exceptions import InvalidTag

from . import config, crypto
from .codec import CodecAdapter, scratch_file
from .errors import (
    InvalidRecordFormat,
    TamperedFileError,
    from_os_error,
)
from .models import CredentialRecord, MasterCredentialEntry

logger = logging.getLogger(__name__)


# =============================================================================
# Paths
# =============================================================================

def credential_file_path(directory: str, username: str) -> str:
    return os.path.join(directory, username + config.CREDENTIAL_FILE_SUFFIX)


def master_file_path(directory: str) -> str:
    return os.path.join(directory, config.MASTER_FILE_NAME)


def _directory_of(path: str) -> str:
    return os.path.dirname(os.path.abspath(path))


# =============================================================================
# Raw file I/O
# =============================================================================

def read_file(path: str) -> bytes:
    """
    Read a whole file.

    Raises:
        MissingFileError: File does not exist
        FilePermissionError: Access denied
        FileAccessError: Any other OS error
    """
    try:
        with open(path, "rb") as f:
            return f.read()
    except OSError as e:
        raise from_os_error(path, "read", e) from e


def write_file_atomic(path: str, data: bytes) -> None:
    """
    Replace `path` with `data` in one step.

    Writes to a temp file beside the target, fsyncs it, then os.replace()s
    it over the target. On failure the target is untouched and the temp
    file is removed.
    """
    try:
        fd, tmp_path = tempfile.mkstemp(
            prefix="." + os.path.basename(path) + ".",
            suffix=".tmp",
            dir=_directory_of(path),
        )
    except OSError as e:
        raise from_os_error(path, "write", e) from e

    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
    except OSError as e:
        raise from_os_error(path, "write", e) from e
    finally:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)


# =============================================================================
# Per-user credential file
# =============================================================================

def encode_records(records: Iterable[CredentialRecord], owner: str = "",
                   sealing_key: Optional[crypto.SealingKey] = None) -> bytes:
    """Serialize records to file bytes (sealed when a key is given)."""
    data = "".join(record.to_line() for record in records).encode(config.ENCODING)
    if sealing_key is None:
        return data
    return crypto.seal(sealing_key.key, sealing_key.salt, data, owner)


def decode_records(blob: bytes, path: str, owner: str = "",
                   sealing_key: Optional[crypto.SealingKey] = None) -> List[CredentialRecord]:
    """
    Parse credential file bytes.

    Blank lines are skipped; any other malformed line fails the whole load.

    Raises:
        InvalidRecordFormat: Bad line (carries path and line number) or bad UTF-8
        TamperedFileError: Sealed file and no key, wrong key, or modified file
    """
    if crypto.is_sealed(blob):
        if sealing_key is None:
            raise TamperedFileError(f"'{path}' is sealed; open it with protect_at_rest=True")
        try:
            blob = crypto.unseal(sealing_key.key, blob, owner)
        except (InvalidTag, ValueError) as e:
            logger.warning(f"Sealed credential file {path} failed authentication")
            raise TamperedFileError(f"'{path}' failed authentication (wrong key or modified file)") from e

    try:
        text = blob.decode(config.ENCODING)
    except UnicodeDecodeError as e:
        raise InvalidRecordFormat(f"{path}: not valid {config.ENCODING} text") from e

    records = []
    for line_number, line in enumerate(text.splitlines(), 1):
        if not line.strip():
            continue
        records.append(CredentialRecord.from_line(line, path, line_number))
    return records


def save_credentials(path: str, records: Iterable[CredentialRecord], owner: str = "",
                     sealing_key: Optional[crypto.SealingKey] = None) -> None:
    """Rewrite the whole credential file atomically."""
    records = list(records)
    write_file_atomic(path, encode_records(records, owner, sealing_key))
    logger.debug(f"Saved {len(records)} records to {path}")


def load_credentials(path: str, owner: str = "",
                     sealing_key: Optional[crypto.SealingKey] = None) -> List[CredentialRecord]:
    """
    Load the credential file in stored order.

    Raises:
        MissingFileError: No file yet (first-time user)
        FilePermissionError / FileAccessError: Cannot read
        InvalidRecordFormat: Malformed line
        TamperedFileError: Sealed file cannot be opened
    """
    records = decode_records(read_file(path), path, owner, sealing_key)
    logger.debug(f"Loaded {len(records)} records from {path}")
    return records


# =============================================================================
# Master credential file
# =============================================================================

def save_master_entries(path: str, entries: Iterable[MasterCredentialEntry],
                        adapter: CodecAdapter) -> None:
    """
    Serialize entries, compress them, and move the result over `path`.

    The existing master file is only replaced once compression succeeded.

    Raises:
        CodecError: Compression failed
        FileAccessError: Scratch or target file cannot be written
    """
    entries = list(entries)
    directory = _directory_of(path)

    with scratch_file(directory) as text_path, scratch_file(directory) as packed_path:
        try:
            with open(text_path, "w", encoding=config.ENCODING, newline="\n") as f:
                for entry in entries:
                    f.write(entry.to_line())
        except OSError as e:
            raise from_os_error(text_path, "write", e) from e

        adapter.compress_file(text_path, packed_path)

        try:
            os.replace(packed_path, path)
        except OSError as e:
            raise from_os_error(path, "write", e) from e

    logger.info(f"Saved {len(entries)} master entries to {path}")


def load_master_entries(path: str, adapter: CodecAdapter) -> List[MasterCredentialEntry]:
    """
    Decompress and parse every master entry.

    Raises:
        MissingFileError / FilePermissionError / FileAccessError: Cannot open `path`
        CodecError: Decompression failed
        InvalidRecordFormat: A line is not exactly "username,password"
    """
    # Probe first so a missing or unreadable file is reported as such,
    # not as a codec failure.
    try:
        with open(path, "rb"):
            pass
    except OSError as e:
        raise from_os_error(path, "read", e) from e

    with scratch_file(_directory_of(path)) as text_path:
        adapter.decompress_file(path, text_path)
        try:
            with open(text_path, "r", encoding=config.ENCODING, newline="") as f:
                lines = f.read().split("\n")
        except OSError as e:
            raise from_os_error(text_path, "read", e) from e
        except UnicodeDecodeError as e:
            raise InvalidRecordFormat(f"{path}: not valid {config.ENCODING} text") from e

    return [
        MasterCredentialEntry.from_line(line, path, line_number)
        for line_number, line in enumerate(lines, 1)
        if line.strip()
    ]


def find_master_entry(path: str, adapter: CodecAdapter, username: str, password: str) -> bool:
    """
    Scan the master file for an exact (username, password) match.

    Passwords are compared in constant time; hashed entries are verified
    with their own salt.
    """
    username_bytes = username.encode(config.ENCODING)
    for entry in load_master_entries(path, adapter):
        if not crypto.constant_compare(entry.username.encode(config.ENCODING), username_bytes):
            continue
        if crypto.verify_master_password(entry.password, password):
            return True
    return False
