"""
Request Signing Module

HMAC-SHA256 signing primitives and REST API request authentication.
"""

from pusher_auth.core.signing.signer import (
    sign,
    verify,
    derive_channel_key,
)
from pusher_auth.core.signing.request import (
    authenticate,
    signed_query_string,
    create_canonical_request,
    body_md5,
    AUTH_VERSION,
)

__all__ = [
    # Primitives
    "sign",
    "verify",
    "derive_channel_key",
    # Requests
    "authenticate",
    "signed_query_string",
    "create_canonical_request",
    "body_md5",
    "AUTH_VERSION",
]
