"""
Trigger Payloads

Builds the JSON bodies for publish calls with validation and channel
encryption applied. The transport serializes the returned dicts, signs the
request with signing.authenticate(), and posts them.

Limits:
- event names: 200 characters
- channels per trigger: 100
- events per batch: 10

Encrypted channels:
    A trigger to a single encrypted channel has its data replaced by the
    encrypted wire JSON. Each encrypted channel has its own derived key and a
    trigger carries one ciphertext, so an encrypted channel among several
    channels is rejected rather than encrypted with only one channel's key.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from pusher_auth.core.channels import (
    ChannelIdentifier,
    classify,
    validate_event_name,
    validate_socket_id,
    validate_user_id,
)
from pusher_auth.core.credentials import Credentials
from pusher_auth.core.encryption import ChannelEncryptor
from pusher_auth.core.exceptions import ValidationError

logger = logging.getLogger(__name__)


MAX_TRIGGER_CHANNELS = 100
MAX_BATCH_EVENTS = 10

USER_CHANNEL_PREFIX = "#server-to-user-"


def serialize_event_data(data: Any) -> str:
    """
    Render event data as the string sent on the wire.

    Strings pass through unchanged; anything else is compact JSON.

    Raises:
        ValidationError: If data is not JSON serializable
    """
    if isinstance(data, str):
        return data
    try:
        return json.dumps(data, separators=(",", ":"), ensure_ascii=False)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Event data is not JSON serializable: {e}") from e


@dataclass
class BatchEvent:
    """
    One event of a batch trigger.

    Attributes:
        name: Event name
        channel: Target channel name
        data: Event data (string or JSON-serializable value)
        socket_id: Socket to exclude from delivery
        info: Comma-separated attributes to return per channel
    """
    name: str
    channel: str
    data: Any
    socket_id: Optional[str] = None
    info: Optional[str] = None


class TriggerPayloadBuilder:
    """
    Validates trigger requests and encrypts data for encrypted channels.

    Usage:
        builder = TriggerPayloadBuilder(credentials)
        body = builder.trigger(["private-encrypted-room"], "message", {"text": "hi"})
        params = authenticate(credentials, "POST", f"/apps/{app_id}/events", json.dumps(body))
    """

    def __init__(self, credentials: Credentials, encryptor: Optional[ChannelEncryptor] = None):
        self.credentials = credentials
        self.encryptor = encryptor or ChannelEncryptor()

    def _classify(self, name: str) -> ChannelIdentifier:
        return classify(name, master_key_configured=self.credentials.has_master_key)

    def _encrypt(self, channel: ChannelIdentifier, data: str) -> str:
        return self.encryptor.encrypt_event_data(
            self.credentials.require_master_key(), channel.name, data
        )

    def trigger(
        self,
        channels: Sequence[str],
        event_name: str,
        data: Any,
        socket_id: Optional[str] = None,
        info: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Build the body of a trigger call.

        Args:
            channels: Target channel names (1 to 100)
            event_name: Event name
            data: Event data
            socket_id: Socket to exclude from delivery
            info: Attributes to return per channel

        Returns:
            Dict with name, data, channels and optional socket_id/info

        Raises:
            ValidationError: Invalid names, too many channels, or an encrypted
                channel mixed with other channels
            ConfigError: Encrypted channel without master key
        """
        if isinstance(channels, str):
            channels = [channels]
        validate_event_name(event_name)
        if socket_id is not None:
            validate_socket_id(socket_id)
        if not channels:
            raise ValidationError("At least one channel is required")
        if len(channels) > MAX_TRIGGER_CHANNELS:
            raise ValidationError(
                f"Can't trigger a message to more than {MAX_TRIGGER_CHANNELS} channels"
            )

        identifiers = [self._classify(name) for name in channels]
        wire_data = serialize_event_data(data)

        encrypted = [c for c in identifiers if c.is_encrypted]
        if encrypted:
            if len(identifiers) > 1:
                raise ValidationError(
                    "You cannot trigger to multiple channels when using encrypted channels"
                )
            wire_data = self._encrypt(encrypted[0], wire_data)

        body: Dict[str, Any] = {
            "name": event_name,
            "data": wire_data,
            "channels": [c.name for c in identifiers],
        }
        if socket_id is not None:
            body["socket_id"] = socket_id
        if info is not None:
            body["info"] = info

        logger.debug(f"Built trigger '{event_name}' for {len(identifiers)} channel(s)")
        return body

    def trigger_batch(self, batch: Sequence[BatchEvent]) -> Dict[str, List[Dict[str, Any]]]:
        """
        Build the body of a batch trigger call.

        Each event on an encrypted channel is encrypted with that channel's key.

        Raises:
            ValidationError: Empty batch, more than 10 events, or invalid event fields
            ConfigError: Encrypted channel without master key
        """
        if not batch:
            raise ValidationError("Batch cannot be empty")
        if len(batch) > MAX_BATCH_EVENTS:
            raise ValidationError(
                f"Batch too large: {len(batch)} events (max {MAX_BATCH_EVENTS})"
            )

        events = []
        for event in batch:
            validate_event_name(event.name)
            if event.socket_id is not None:
                validate_socket_id(event.socket_id)
            channel = self._classify(event.channel)

            wire_data = serialize_event_data(event.data)
            if channel.is_encrypted:
                wire_data = self._encrypt(channel, wire_data)

            entry: Dict[str, Any] = {"name": event.name, "channel": channel.name, "data": wire_data}
            if event.socket_id is not None:
                entry["socket_id"] = event.socket_id
            if event.info is not None:
                entry["info"] = event.info
            events.append(entry)

        logger.debug(f"Built batch of {len(events)} event(s)")
        return {"batch": events}

    def send_to_user(self, user_id: str, event_name: str, data: Any) -> Dict[str, Any]:
        """Build a trigger body addressed to a single authenticated user."""
        validate_user_id(user_id)
        validate_event_name(event_name)
        # User channels start with '#', which channel names may not contain
        return {
            "name": event_name,
            "data": serialize_event_data(data),
            "channels": [f"{USER_CHANNEL_PREFIX}{user_id}"],
        }


def terminate_user_connections_path(user_id: str) -> str:
    """Path (relative to /apps/{app_id}) for terminating a user's connections."""
    validate_user_id(user_id)
    return f"/users/{user_id}/terminate_connections"
