"""
Channel Authorization

Signs subscription requests for private, presence and encrypted channels.

String to sign:
    {socket_id}:{channel_name}                      (private / encrypted)
    {socket_id}:{channel_name}:{channel_data_json}  (presence)

Encrypted channels additionally receive the base64 per-channel shared
secret so the subscriber can decrypt events on its own.
"""

import base64
import logging
from typing import Any, Mapping, Optional, Union

from pusher_auth.core.auth.models import SocketAuthResult, canonical_json
from pusher_auth.core.channels import ChannelIdentifier, classify, validate_socket_id
from pusher_auth.core.credentials import Credentials
from pusher_auth.core.encryption import ChannelEncryptor
from pusher_auth.core.exceptions import ConfigError, ValidationError
from pusher_auth.core.secret import SecretBytes
from pusher_auth.core.signing.signer import sign

logger = logging.getLogger(__name__)


class ChannelAuthorizer:
    """
    Produces SocketAuthResult values for subscription requests.

    Usage:
        authorizer = ChannelAuthorizer(credentials)
        result = authorizer.authorize("123.456", "presence-game",
                                      {"user_id": "10", "user_info": {"name": "Alice"}})
        return result.to_dict()
    """

    def __init__(self, credentials: Credentials, encryptor: Optional[ChannelEncryptor] = None):
        self.credentials = credentials
        self.encryptor = encryptor or ChannelEncryptor()

    def authorize(
        self,
        socket_id: str,
        channel: Union[ChannelIdentifier, str],
        presence_data: Optional[Mapping[str, Any]] = None,
    ) -> SocketAuthResult:
        """
        Authorize a socket to subscribe to a channel.

        Args:
            socket_id: Socket id of the subscriber ("digits.digits")
            channel: Classified channel or raw channel name
            presence_data: Member data; required for presence channels

        Returns:
            SocketAuthResult

        Raises:
            ValidationError: Bad socket id, public channel, missing presence data
            ConfigError: Encrypted channel without master key
        """
        validate_socket_id(socket_id)

        if isinstance(channel, str):
            channel = classify(channel, master_key_configured=self.credentials.has_master_key)

        if not channel.requires_auth:
            raise ValidationError(f"Public channel '{channel.name}' does not require authorization")

        if channel.is_presence and presence_data is None:
            raise ValidationError(f"Presence channel '{channel.name}' requires presence data")

        channel_data = None
        string_to_sign = f"{socket_id}:{channel.name}"
        if presence_data is not None:
            channel_data = canonical_json(presence_data)
            string_to_sign = f"{string_to_sign}:{channel_data}"

        signature = sign(self.credentials.secret, string_to_sign)
        shared_secret = None
        if channel.is_encrypted:
            shared_secret = self._shared_secret_b64(channel.name)

        logger.debug(f"Authorized socket {socket_id} for {channel.kind.value} channel {channel.name}")
        return SocketAuthResult(
            auth=f"{self.credentials.key}:{signature}",
            channel_data=channel_data,
            shared_secret=shared_secret,
        )

    def _shared_secret_b64(self, channel_name: str) -> str:
        if not self.credentials.has_master_key:
            raise ConfigError(
                "Cannot generate shared_secret because the encryption master key is not set"
            )
        derived = self.encryptor.derive_shared_secret(self.credentials.master_key, channel_name)
        with SecretBytes(derived) as key:
            return base64.b64encode(key.reveal()).decode("ascii")


def authorize(
    credentials: Credentials,
    socket_id: str,
    channel: Union[ChannelIdentifier, str],
    presence_data: Optional[Mapping[str, Any]] = None,
) -> SocketAuthResult:
    """Functional shortcut for ChannelAuthorizer(credentials).authorize(...)."""
    return ChannelAuthorizer(credentials).authorize(socket_id, channel, presence_data)
