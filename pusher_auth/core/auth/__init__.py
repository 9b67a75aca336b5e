"""
Subscriber Authorization

Channel subscription authorization and user authentication.
"""

from pusher_auth.core.auth.models import (
    SocketAuthResult,
    UserAuthResult,
    canonical_json,
)
from pusher_auth.core.auth.channel import ChannelAuthorizer, authorize
from pusher_auth.core.auth.user import authenticate_user

__all__ = [
    "SocketAuthResult",
    "UserAuthResult",
    "canonical_json",
    "ChannelAuthorizer",
    "authorize",
    "authenticate_user",
]
