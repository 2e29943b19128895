"""
Project constants definitions
"""

# ============================================================
# Application Storage
# ============================================================

APP_NAME = "scpdeck"
SETTINGS_PATH = "~/.scpdeck/settings.json"
CONFIG_PATH = "~/.scpdeck/config.toml"
KEYS_DIR = "~/.scpdeck/keys"

KEYRING_SERVICE = APP_NAME

# ============================================================
# SSH Identity
# ============================================================

SSH_DIR = "~/.ssh"
PUBLIC_KEY_SUFFIX = ".pub"
FALLBACK_IDENTITIES = ("id_rsa", "id_ed25519")
KEY_FILE_MODE = 0o600

SSH_AUTH_SOCK = "SSH_AUTH_SOCK"

# ============================================================
# Default Values
# ============================================================

DEFAULT_BASE_DIRECTORY = "~"
DEFAULT_REMOTE_PATH = "~"
DEFAULT_LOCAL_DIR = "~/Downloads"
DEFAULT_COMMAND_TIMEOUT = 120
AGENT_LOOKUP_TIMEOUT = 5

# ============================================================
# Remote Listing
# ============================================================

LISTING_COMMAND = "ls -laF --group-directories-first"
LISTING_MIN_FIELDS = 9
LISTING_TOTAL_MARKER = "total "
# listed but never shown or transferred
DOT_ENTRIES = (".", "..")

HOME_SHORTHAND = "~"
REMOTE_SEPARATOR = "/"

# ============================================================
# Subprocess
# ============================================================

STREAM_CHUNK_SIZE = 4096

# Fixed options for every ssh/scp invocation: non-interactive, no persisted
# host identity, public key only, verbose diagnostics.
BASE_SSH_OPTIONS = (
    "-vvv",
    "-F", "/dev/null",
    "-o", "BatchMode=yes",
    "-o", "StrictHostKeyChecking=no",
    "-o", "UserKnownHostsFile=/dev/null",
    "-o", "GlobalKnownHostsFile=/dev/null",
    "-o", "PreferredAuthentications=publickey",
    "-o", "LogLevel=DEBUG3",
)

# Only Apple's OpenSSH build understands UseKeychain
MACOS_SSH_OPTIONS = ("-o", "UseKeychain=yes")

LEGACY_ALGORITHM_OPTIONS = (
    "-o", "IdentitiesOnly=no",
    "-o", "PubkeyAcceptedAlgorithms=+ssh-rsa",
    "-o", "HostkeyAlgorithms=+ssh-rsa",
)
