"""
Error Taxonomy

Every failure the core can detect maps to one of four kinds:

- ValidationError: the caller's input is malformed (channel name, socket id,
  user id, missing presence data, several encrypted channels in one trigger)
- ConfigError: the caller's setup is at fault (master key absent or not 32 bytes)
- EncryptionError: ciphertext failed authentication or is malformed
- SigningError: the keyed hash itself failed (unexpected, not recoverable)

None of these are retried: signing and crypto failures are deterministic.
"""


class PusherAuthError(Exception):
    """Base class for all errors raised by pusher_auth."""


class ValidationError(PusherAuthError):
    """Malformed input supplied by the caller."""


class ConfigError(PusherAuthError):
    """Credentials or encryption settings are missing or invalid."""


class EncryptionError(PusherAuthError):
    """Authenticated decryption failed or the payload is malformed."""


class SigningError(PusherAuthError):
    """Computing a keyed hash failed."""
