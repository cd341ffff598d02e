"""
credstore - Configuration constants

Everything tunable lives here as a plain module constant. There is no
config file and no environment lookup: callers choose the data directory
when they construct a Vault.
"""

# =============================================================================
# File layout
# =============================================================================

CREDENTIAL_FILE_SUFFIX = "_passwords.dat"    # <username>_passwords.dat
MASTER_FILE_NAME = "user_credentials.csv"    # compressed master entries
SCRATCH_PREFIX = "temp_user_credentials"     # scratch files: temp_user_credentials*.txt
SCRATCH_SUFFIX = ".txt"

ENCODING = "utf-8"

# =============================================================================
# Record format
# =============================================================================

PAYLOAD_SEPARATOR = ":"      # secret payload is "username:password"
MASTER_SEPARATOR = ","       # master lines are "username,password"

# Passwords must be strictly longer than this
MIN_PASSWORD_LENGTH = 8

# =============================================================================
# Password generation
# =============================================================================

GENERATOR_ALPHABET = (
    "abcdefghijklmnopqrstuvwxyz"
    "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
    "0123456789"
    "!@#$%^&*()"
)
DEFAULT_GENERATED_LENGTH = 16

# =============================================================================
# Hardened mode (protect_at_rest=True)
# =============================================================================

SALT_SIZE = 16
KEY_SIZE = 32            # AES-256
NONCE_SIZE = 12          # 96-bit nonce for AES-GCM

# scrypt cost: N = CPU/memory cost (power of 2), r = block size, p = parallelization
SCRYPT_N = 2**15
SCRYPT_R = 8
SCRYPT_P = 1

SEALED_MAGIC = b"CSV1"           # sealed per-user credential file
MASTER_HASH_SCHEME = "scrypt"    # hashed master entries: scrypt$<salt>$<digest>

# =============================================================================
# Logging (command line only)
# =============================================================================

LOG_FILE = "credstore.log"
