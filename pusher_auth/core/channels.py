"""
Channel Classification

Parses channel names into a typed identifier whose kind is derived from the
name prefix. Also hosts the other identifier validators (socket id, user id,
event name) used across the signing components.

Prefixes (longest match wins):
    private-encrypted-   -> PRIVATE_ENCRYPTED
    presence-encrypted-  -> PRESENCE_ENCRYPTED
    presence-            -> PRESENCE
    private-             -> PRIVATE
    (anything else)      -> PUBLIC

presence-encrypted- is its own encrypted kind here, so such channels need
an encryption master key like private-encrypted- ones; classify() raises
ConfigError for them when none is configured. Clients that treat
"presence-encrypted-x" as a plain presence channel should name it
"presence-x" instead.
"""

import re
from dataclasses import dataclass
from enum import Enum

from pusher_auth.core.exceptions import ConfigError, ValidationError


MAX_CHANNEL_NAME_LENGTH = 200
MAX_EVENT_NAME_LENGTH = 200

CHANNEL_NAME_PATTERN = re.compile(r"^[A-Za-z0-9_\-=@,.;]+$")
SOCKET_ID_PATTERN = re.compile(r"^\d+\.\d+$", re.ASCII)


class ChannelKind(str, Enum):
    """Security kind of a channel."""
    PUBLIC = "public"
    PRIVATE = "private"
    PRESENCE = "presence"
    PRIVATE_ENCRYPTED = "private_encrypted"
    PRESENCE_ENCRYPTED = "presence_encrypted"


# Checked in order, so longer prefixes must come first
_PREFIXES = (
    ("private-encrypted-", ChannelKind.PRIVATE_ENCRYPTED),
    ("presence-encrypted-", ChannelKind.PRESENCE_ENCRYPTED),
    ("presence-", ChannelKind.PRESENCE),
    ("private-", ChannelKind.PRIVATE),
)

_ENCRYPTED_KINDS = frozenset({ChannelKind.PRIVATE_ENCRYPTED, ChannelKind.PRESENCE_ENCRYPTED})
_PRESENCE_KINDS = frozenset({ChannelKind.PRESENCE, ChannelKind.PRESENCE_ENCRYPTED})


@dataclass(frozen=True)
class ChannelIdentifier:
    """
    A validated channel name and its kind.

    Attributes:
        name: Full channel name including prefix
        kind: Kind derived from the prefix
    """
    name: str
    kind: ChannelKind

    @property
    def requires_auth(self) -> bool:
        return self.kind is not ChannelKind.PUBLIC

    @property
    def is_encrypted(self) -> bool:
        return self.kind in _ENCRYPTED_KINDS

    @property
    def is_presence(self) -> bool:
        return self.kind in _PRESENCE_KINDS

    def __str__(self) -> str:
        return self.name


def validate_channel_name(name: str) -> None:
    """
    Check a channel name against the length and character rules.

    Raises:
        ValidationError: If the name is empty, too long or has invalid characters
    """
    if not name:
        raise ValidationError("Channel name cannot be empty")
    if len(name) > MAX_CHANNEL_NAME_LENGTH:
        raise ValidationError(
            f"Channel name too long: '{name}' (max {MAX_CHANNEL_NAME_LENGTH} characters)"
        )
    if not CHANNEL_NAME_PATTERN.fullmatch(name):
        raise ValidationError(
            f"Invalid channel name: '{name}'. Must match pattern: [A-Za-z0-9_\\-=@,.;]+"
        )


def classify(name: str, master_key_configured: bool = False) -> ChannelIdentifier:
    """
    Classify a channel name.

    Args:
        name: Channel name as supplied by the caller
        master_key_configured: Whether the credentials carry a master key

    Returns:
        ChannelIdentifier with the derived kind

    Raises:
        ValidationError: If the name is malformed
        ConfigError: If the channel is encrypted but no master key is configured

    Example:
        >>> classify("presence-game").kind
        <ChannelKind.PRESENCE: 'presence'>
    """
    validate_channel_name(name)

    kind = ChannelKind.PUBLIC
    for prefix, prefix_kind in _PREFIXES:
        if name.startswith(prefix):
            kind = prefix_kind
            break

    if kind in _ENCRYPTED_KINDS and not master_key_configured:
        raise ConfigError(
            f"Channel '{name}' is encrypted but no encryption master key is configured"
        )

    return ChannelIdentifier(name=name, kind=kind)


def validate_socket_id(socket_id: str) -> None:
    """Raise ValidationError unless socket_id looks like '123.456'."""
    if not isinstance(socket_id, str) or not SOCKET_ID_PATTERN.fullmatch(socket_id):
        raise ValidationError(f"Invalid socket id: '{socket_id}'")


def validate_user_id(user_id: str) -> None:
    """Raise ValidationError for an empty or non-string user id."""
    if not isinstance(user_id, str) or not user_id:
        raise ValidationError("User ID cannot be empty")


def validate_event_name(event_name: str) -> None:
    """Raise ValidationError for an empty or over-long event name."""
    if not event_name:
        raise ValidationError("Event name cannot be empty")
    if len(event_name) > MAX_EVENT_NAME_LENGTH:
        raise ValidationError(
            f"Event name too long: '{event_name}' (max {MAX_EVENT_NAME_LENGTH} characters)"
        )
