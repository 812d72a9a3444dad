"""Guest identity constants."""

GUEST_ID_PREFIX = "guest_"

# ``secrets.token_hex(16)`` yields 32 hex characters.
GUEST_ID_TOKEN_BYTES = 16
GUEST_ID_MAX_LENGTH = 64
