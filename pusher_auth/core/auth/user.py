"""
User Authentication

Signs user sign-in requests for user-scoped features
(server-to-user events, connection termination).

String to sign:
    {socket_id}::user::{user_data_json}
"""

import logging
from typing import Any, Mapping

from pusher_auth.core.auth.models import UserAuthResult, canonical_json
from pusher_auth.core.channels import validate_socket_id
from pusher_auth.core.credentials import Credentials
from pusher_auth.core.exceptions import ValidationError
from pusher_auth.core.signing.signer import sign

logger = logging.getLogger(__name__)


def authenticate_user(
    credentials: Credentials,
    socket_id: str,
    user_data: Mapping[str, Any],
) -> UserAuthResult:
    """
    Authenticate a connected user.

    Args:
        credentials: App credentials
        socket_id: Socket id of the connection
        user_data: User object; must contain a non-empty string "id"

    Returns:
        UserAuthResult with auth string and canonical user_data

    Raises:
        ValidationError: Bad socket id, or user_data without a usable id
    """
    validate_socket_id(socket_id)

    if not isinstance(user_data, Mapping):
        raise ValidationError("User data must be a JSON object")
    user_id = user_data.get("id")
    if not isinstance(user_id, str) or not user_id:
        raise ValidationError("User data must contain a non-empty string 'id' field")

    serialized = canonical_json(dict(user_data))
    signature = sign(credentials.secret, f"{socket_id}::user::{serialized}")

    logger.debug(f"Authenticated user {user_id} on socket {socket_id}")
    return UserAuthResult(auth=f"{credentials.key}:{signature}", user_data=serialized)
