"""
credstore - Cryptography Module

Everything that touches key material or randomness lives in this file:
- Password generation (CSPRNG)
- Constant-time comparison for master-credential checks
- Hardened mode (protect_at_rest=True):
    1. Master password -> scrypt -> 32-byte file key
    2. Credential file -> AES-256-GCM, bound to its owner via associated data
    3. Master entries store scrypt$<salt>$<digest> instead of the password

The default (unhardened) mode only uses generate_password() and
constant_compare(); nothing is encrypted unless the caller opts in.
"""

import base64
import hmac
import json
import os
import secrets
from typing import NamedTuple, Optional, Tuple

from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.scrypt import Scrypt

from . import config


# =============================================================================
# Key Derivation
# =============================================================================

def derive_key(password: str, salt: bytes) -> bytes:
    """
    Derive a 32-byte key from a password using scrypt.

    Args:
        password: Master password
        salt: Random salt (stored next to the data, NOT secret)

    Returns:
        32-byte key
    """
    kdf = Scrypt(
        salt=salt,
        length=config.KEY_SIZE,
        n=config.SCRYPT_N,
        r=config.SCRYPT_R,
        p=config.SCRYPT_P,
    )
    return kdf.derive(password.encode(config.ENCODING))


def new_salt() -> bytes:
    return os.urandom(config.SALT_SIZE)


# =============================================================================
# Canonical Associated Data
# =============================================================================

def canonical_ad(ad: dict) -> bytes:
    """
    Convert associated data to canonical JSON bytes.

    Sorted keys, compact separators, UTF-8 without escaping, so the same
    dict always produces the same bytes.
    """
    json_str = json.dumps(ad, separators=(",", ":"), sort_keys=True, ensure_ascii=False)
    return json_str.encode("utf-8")


# =============================================================================
# Encryption (AES-256-GCM)
# =============================================================================

def encrypt(key: bytes, plaintext: bytes, associated_data: dict) -> Tuple[bytes, bytes]:
    """
    Encrypt data with AES-256-GCM.

    Returns:
        (nonce, ciphertext) - ciphertext includes the 16-byte tag
    """
    nonce = os.urandom(config.NONCE_SIZE)
    ciphertext = AESGCM(key).encrypt(nonce, plaintext, canonical_ad(associated_data))
    return nonce, ciphertext


def decrypt(key: bytes, nonce: bytes, ciphertext: bytes, associated_data: dict) -> bytes:
    """
    Decrypt AES-256-GCM ciphertext.

    Raises:
        cryptography.exceptions.InvalidTag: Wrong key, wrong AD, or tampered data
    """
    return AESGCM(key).decrypt(nonce, ciphertext, canonical_ad(associated_data))


# =============================================================================
# Sealed credential files
# =============================================================================

class SealingKey(NamedTuple):
    """File key plus the salt it was derived with (the salt goes in the file header)."""
    salt: bytes
    key: bytes


def derive_sealing_key(password: str, salt: Optional[bytes] = None) -> SealingKey:
    """Derive the key for a sealed credential file; a new salt is drawn if none is given."""
    salt = salt if salt is not None else new_salt()
    return SealingKey(salt, derive_key(password, salt))


def credentials_ad(owner: str) -> dict:
    """Associated data binding a sealed credential file to its owner."""
    return {"ctx": "credentials", "owner": owner, "aead": "aes256gcm"}


def is_sealed(blob: bytes) -> bool:
    return blob.startswith(config.SEALED_MAGIC)


def sealed_salt(blob: bytes) -> bytes:
    """Return the KDF salt stored in a sealed file header."""
    start = len(config.SEALED_MAGIC)
    salt = blob[start:start + config.SALT_SIZE]
    if len(salt) != config.SALT_SIZE:
        raise ValueError("Sealed file header is truncated")
    return salt


def seal(key: bytes, salt: bytes, plaintext: bytes, owner: str) -> bytes:
    """
    Encrypt a credential file body.

    Layout: magic | salt | nonce | ciphertext+tag
    """
    nonce, ciphertext = encrypt(key, plaintext, credentials_ad(owner))
    return config.SEALED_MAGIC + salt + nonce + ciphertext


def unseal(key: bytes, blob: bytes, owner: str) -> bytes:
    """
    Decrypt a sealed credential file body.

    Raises:
        ValueError: Header is truncated
        cryptography.exceptions.InvalidTag: Wrong key or tampered file
    """
    start = len(config.SEALED_MAGIC) + config.SALT_SIZE
    nonce = blob[start:start + config.NONCE_SIZE]
    ciphertext = blob[start + config.NONCE_SIZE:]
    if len(nonce) != config.NONCE_SIZE or not ciphertext:
        raise ValueError("Sealed file is truncated")
    return decrypt(key, nonce, ciphertext, credentials_ad(owner))


# =============================================================================
# Master password hashing
# =============================================================================

def hash_master_password(password: str, salt: Optional[bytes] = None) -> str:
    """
    Produce the stored form of a master password: scrypt$<b64 salt>$<b64 digest>.

    Base64 never contains ',' or '$', so the result is safe inside a
    "username,password" master line.
    """
    salt = salt if salt is not None else new_salt()
    digest = derive_key(password, salt)
    return "$".join((
        config.MASTER_HASH_SCHEME,
        base64.b64encode(salt).decode("ascii"),
        base64.b64encode(digest).decode("ascii"),
    ))


def is_hashed_master_password(stored: str) -> bool:
    return stored.startswith(config.MASTER_HASH_SCHEME + "$")


def verify_master_password(stored: str, candidate: str) -> bool:
    """
    Check a candidate against a stored master password.

    Hashed entries are re-derived with their own salt; plaintext entries
    are compared directly. Both comparisons are constant-time.
    """
    if not is_hashed_master_password(stored):
        return constant_compare(stored.encode(config.ENCODING), candidate.encode(config.ENCODING))

    try:
        _, salt_b64, digest_b64 = stored.split("$")
        salt = base64.b64decode(salt_b64, validate=True)
        digest = base64.b64decode(digest_b64, validate=True)
    except ValueError:
        return False
    return constant_compare(derive_key(candidate, salt), digest)


# =============================================================================
# Password Generation
# =============================================================================

def generate_password(length: int = config.DEFAULT_GENERATED_LENGTH) -> str:
    """
    Generate a random password from GENERATOR_ALPHABET.

    Uses secrets.choice(), which is backed by os.urandom().

    Raises:
        ValueError: If length is not positive
    """
    if length <= 0:
        raise ValueError("Password length must be greater than 0.")
    return "".join(secrets.choice(config.GENERATOR_ALPHABET) for _ in range(length))


# =============================================================================
# Helpers
# =============================================================================

def constant_compare(a: bytes, b: bytes) -> bool:
    """
    Compare two byte strings in constant time.

    Normal comparison (a == b) returns on the first mismatch, which leaks
    how many leading bytes matched through timing.
    """
    return hmac.compare_digest(a, b)
