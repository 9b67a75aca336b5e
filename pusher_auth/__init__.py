"""
pusher-auth

Authentication and end-to-end encryption core for Pusher Channels clients:
- Channel classification (public / private / presence / encrypted)
- REST API request signing
- Channel authorization and user authentication
- Webhook validation and typed event decoding
- Per-channel key derivation and authenticated encryption
"""

from pusher_auth.core.exceptions import (
    PusherAuthError,
    ValidationError,
    ConfigError,
    EncryptionError,
    SigningError,
)
from pusher_auth.core.secret import SecretBytes
from pusher_auth.core.credentials import Credentials, CryptoContext
from pusher_auth.core.channels import ChannelKind, ChannelIdentifier, classify
from pusher_auth.core.signing import authenticate, signed_query_string, sign, verify
from pusher_auth.core.encryption import ChannelEncryptor, EncryptedPayload
from pusher_auth.core.auth import (
    ChannelAuthorizer,
    SocketAuthResult,
    UserAuthResult,
    authorize,
    authenticate_user,
)
from pusher_auth.core.webhooks import Webhook, WebhookValidator, decode_events
from pusher_auth.core.events import BatchEvent, TriggerPayloadBuilder

__all__ = [
    # Errors
    "PusherAuthError",
    "ValidationError",
    "ConfigError",
    "EncryptionError",
    "SigningError",
    # Credentials
    "SecretBytes",
    "Credentials",
    "CryptoContext",
    # Channels
    "ChannelKind",
    "ChannelIdentifier",
    "classify",
    # Signing
    "authenticate",
    "signed_query_string",
    "sign",
    "verify",
    # Encryption
    "ChannelEncryptor",
    "EncryptedPayload",
    # Authorization
    "ChannelAuthorizer",
    "SocketAuthResult",
    "UserAuthResult",
    "authorize",
    "authenticate_user",
    # Webhooks
    "Webhook",
    "WebhookValidator",
    "decode_events",
    # Publishing
    "BatchEvent",
    "TriggerPayloadBuilder",
]
