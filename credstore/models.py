"""
credstore - Record types

CredentialRecord:       one stored login, "service  username:password"
MasterCredentialEntry:  one line of the master file, "username,password"

Both are immutable, so handing one to a caller never exposes store state.
"""

import os
from dataclasses import dataclass
from typing import Optional, Tuple

from . import config
from .errors import InvalidRecordFormat


def _has_whitespace(value: str) -> bool:
    return any(ch.isspace() for ch in value)


def check_owner_name(username: str) -> None:
    """
    Reject usernames that cannot safely become part of a file name.

    The credential file is <username>_passwords.dat inside the vault
    directory, so path separators and "."/".." are refused.

    Raises:
        InvalidRecordFormat: Empty name, path separator, or "."/".."
    """
    if not username:
        raise InvalidRecordFormat("Username cannot be empty")
    separators = [sep for sep in (os.sep, os.altsep, "/") if sep]
    if username in (".", "..") or any(sep in username for sep in separators):
        raise InvalidRecordFormat(f"Username {username!r} cannot be used as a file name")


@dataclass(frozen=True)
class CredentialRecord:
    """A service name plus its packed "username:password" payload."""
    service_name: str
    secret_payload: str

    @classmethod
    def pack(cls, service_name: str, username: str, password: str) -> "CredentialRecord":
        """
        Build a record from its parts, rejecting anything the line format
        cannot carry.

        Raises:
            InvalidRecordFormat: Empty service name, whitespace in any field,
                or ':' in the username or password
        """
        sep = config.PAYLOAD_SEPARATOR
        if not service_name:
            raise InvalidRecordFormat("Service name cannot be empty")
        for label, value in (("Service name", service_name), ("Username", username), ("Password", password)):
            if _has_whitespace(value):
                raise InvalidRecordFormat(f"{label} cannot contain whitespace")
        if sep in username or sep in password:
            raise InvalidRecordFormat(f"Username and password cannot contain '{sep}'")
        return cls(service_name, username + sep + password)

    @classmethod
    def from_line(cls, line: str, path: Optional[str] = None,
                  line_number: Optional[int] = None) -> "CredentialRecord":
        """Parse one credential-file line: two whitespace-separated tokens."""
        tokens = line.split()
        if len(tokens) != 2:
            raise InvalidRecordFormat(f"Expected 2 fields, found {len(tokens)}", path, line_number)
        service_name, payload = tokens
        if payload.count(config.PAYLOAD_SEPARATOR) != 1:
            raise InvalidRecordFormat(
                f"Payload must contain exactly one '{config.PAYLOAD_SEPARATOR}'", path, line_number)
        return cls(service_name, payload)

    def to_line(self) -> str:
        return f"{self.service_name} {self.secret_payload}\n"

    def split(self) -> Tuple[str, str]:
        """(username, password), split on the first separator."""
        username, _, password = self.secret_payload.partition(config.PAYLOAD_SEPARATOR)
        return username, password

    @property
    def username(self) -> str:
        return self.split()[0]

    @property
    def password(self) -> str:
        return self.split()[1]

    def __repr__(self):
        return f"CredentialRecord(service_name={self.service_name!r}, username={self.username!r}, password=<hidden>)"


@dataclass(frozen=True)
class MasterCredentialEntry:
    """One master identity. `password` may be plaintext or a scrypt$... hash."""
    username: str
    password: str

    def __post_init__(self):
        if not self.username:
            raise InvalidRecordFormat("Master username cannot be empty")
        for value in (self.username, self.password):
            if config.MASTER_SEPARATOR in value or "\n" in value or "\r" in value:
                raise InvalidRecordFormat(
                    f"Master credentials cannot contain '{config.MASTER_SEPARATOR}' or line breaks")

    @classmethod
    def from_line(cls, line: str, path: Optional[str] = None,
                  line_number: Optional[int] = None) -> "MasterCredentialEntry":
        fields = line.rstrip("\r\n").split(config.MASTER_SEPARATOR)
        if len(fields) != 2:
            raise InvalidRecordFormat(f"Expected 2 fields, found {len(fields)}", path, line_number)
        try:
            return cls(fields[0], fields[1])
        except InvalidRecordFormat as e:
            raise InvalidRecordFormat(str(e), path, line_number) from e

    def to_line(self) -> str:
        return f"{self.username}{config.MASTER_SEPARATOR}{self.password}\n"

    def __repr__(self):
        return f"MasterCredentialEntry(username={self.username!r}, password=<hidden>)"
