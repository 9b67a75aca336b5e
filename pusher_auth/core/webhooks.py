"""
Webhook Validation

Verifies inbound webhook signatures and decodes their events.

Request format:
    Headers:
        X-Pusher-Key:        app key the webhook was signed for
        X-Pusher-Signature:  hex HMAC-SHA256 of the raw body with that app's secret
    Body:
        {"time_ms": 1700000000000, "events": [{"name": "channel_occupied", ...}]}

Validation accepts the primary credentials plus any number of additional
credentials, so webhooks keep validating while an app secret is rotated.

Events decode into a closed set of variants. Unknown event names, and known
names missing a required field, decode to GenericEvent with the raw fields
preserved, so new event types never break existing consumers.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from pydantic import BaseModel, StrictInt
from pydantic import ValidationError as PydanticValidationError

from pusher_auth.core.credentials import Credentials
from pusher_auth.core.exceptions import ValidationError
from pusher_auth.core.signing.signer import verify

logger = logging.getLogger(__name__)


HEADER_KEY = "X-Pusher-Key"
HEADER_SIGNATURE = "X-Pusher-Signature"
HEADER_CONTENT_TYPE = "Content-Type"

# Event names
CHANNEL_OCCUPIED = "channel_occupied"
CHANNEL_VACATED = "channel_vacated"
MEMBER_ADDED = "member_added"
MEMBER_REMOVED = "member_removed"
CLIENT_EVENT = "client_event"
SUBSCRIPTION_COUNT = "subscription_count"
CACHE_MISS = "cache_miss"


# ============================================================================
# Event Variants
# ============================================================================

@dataclass(frozen=True)
class ChannelOccupied:
    channel: str
    name: str = field(default=CHANNEL_OCCUPIED, init=False)


@dataclass(frozen=True)
class ChannelVacated:
    channel: str
    name: str = field(default=CHANNEL_VACATED, init=False)


@dataclass(frozen=True)
class MemberAdded:
    channel: str
    user_id: str
    name: str = field(default=MEMBER_ADDED, init=False)


@dataclass(frozen=True)
class MemberRemoved:
    channel: str
    user_id: str
    name: str = field(default=MEMBER_REMOVED, init=False)


@dataclass(frozen=True)
class ClientEvent:
    """A client event sent by a subscriber (e.g. 'client-typing')."""
    channel: str
    event: str
    data: str
    socket_id: str
    user_id: Optional[str] = None
    name: str = field(default=CLIENT_EVENT, init=False)


@dataclass(frozen=True)
class SubscriptionCount:
    channel: str
    subscription_count: int
    name: str = field(default=SUBSCRIPTION_COUNT, init=False)


@dataclass(frozen=True)
class CacheMiss:
    """A client subscribed to a cache channel that had no cached event."""
    channel: str
    name: str = field(default=CACHE_MISS, init=False)


@dataclass(frozen=True)
class GenericEvent:
    """
    Fallback for unrecognized or incomplete events.

    Attributes:
        name: Event name as received (None if absent)
        fields: All raw fields of the event, including "name"
    """
    name: Optional[str]
    fields: Dict[str, Any]

    @property
    def channel(self) -> Optional[str]:
        value = self.fields.get("channel")
        return value if isinstance(value, str) else None


WebhookEvent = Union[
    ChannelOccupied,
    ChannelVacated,
    MemberAdded,
    MemberRemoved,
    ClientEvent,
    SubscriptionCount,
    CacheMiss,
    GenericEvent,
]


class WebhookPayload(BaseModel):
    """Parsed webhook body."""
    time_ms: StrictInt
    events: List[Dict[str, Any]]


# ============================================================================
# Decoding
# ============================================================================

def _str(raw: Mapping[str, Any], key: str) -> Optional[str]:
    value = raw.get(key)
    return value if isinstance(value, str) else None


def decode_event(raw: Mapping[str, Any]) -> WebhookEvent:
    """
    Decode one raw event into its variant.

    Never raises; anything that doesn't fit a known variant becomes GenericEvent.
    """
    name = _str(raw, "name")
    channel = _str(raw, "channel")

    if channel is not None:
        if name == CHANNEL_OCCUPIED:
            return ChannelOccupied(channel=channel)
        if name == CHANNEL_VACATED:
            return ChannelVacated(channel=channel)
        if name == CACHE_MISS:
            return CacheMiss(channel=channel)

        user_id = _str(raw, "user_id")
        if name == MEMBER_ADDED and user_id is not None:
            return MemberAdded(channel=channel, user_id=user_id)
        if name == MEMBER_REMOVED and user_id is not None:
            return MemberRemoved(channel=channel, user_id=user_id)

        if name == CLIENT_EVENT:
            event, data, socket_id = _str(raw, "event"), _str(raw, "data"), _str(raw, "socket_id")
            if event is not None and data is not None and socket_id is not None:
                return ClientEvent(
                    channel=channel,
                    event=event,
                    data=data,
                    socket_id=socket_id,
                    user_id=user_id,
                )

        if name == SUBSCRIPTION_COUNT:
            count = raw.get("subscription_count")
            # bool is an int subclass, but never a valid count
            if isinstance(count, int) and not isinstance(count, bool):
                return SubscriptionCount(channel=channel, subscription_count=count)

    return GenericEvent(name=_raw_name(raw), fields=dict(raw))


def _raw_name(raw: Mapping[str, Any]) -> Optional[str]:
    value = raw.get("name")
    return None if value is None else str(value)


def parse_payload(raw_body: Union[bytes, str]) -> WebhookPayload:
    """
    Parse a webhook body into time_ms and raw events.

    Raises:
        ValidationError: If the body is not JSON or not the expected shape
    """
    try:
        data = json.loads(raw_body)
    except (json.JSONDecodeError, UnicodeDecodeError, RecursionError) as e:
        raise ValidationError(f"Webhook body is not valid JSON: {e}") from e

    try:
        return WebhookPayload.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid webhook body: {e.error_count()} validation error(s)") from e


def decode_events(raw_body: Union[bytes, str]) -> List[WebhookEvent]:
    """
    Decode every event in a webhook body.

    Raises:
        ValidationError: If the envelope itself is malformed
    """
    payload = parse_payload(raw_body)
    return [decode_event(raw) for raw in payload.events]


# ============================================================================
# Signature Validation
# ============================================================================

def _header(headers: Mapping[str, str], name: str) -> Optional[str]:
    wanted = name.lower()
    for key, value in headers.items():
        if key.lower() == wanted:
            return value
    return None


class WebhookValidator:
    """
    Validates webhook signatures against one or more credentials.

    Attributes:
        credentials: Primary credentials followed by any additional accepted ones
    """

    def __init__(
        self,
        credentials: Credentials,
        additional_credentials: Iterable[Credentials] = (),
    ):
        self.credentials: Sequence[Credentials] = (credentials, *additional_credentials)

    def validate(self, headers: Mapping[str, str], raw_body: Union[bytes, str]) -> bool:
        """
        Check that the webhook was signed by a known app.

        Returns False (never raises) on a missing header, unknown key or bad signature.
        """
        key = _header(headers, HEADER_KEY)
        signature = _header(headers, HEADER_SIGNATURE)
        if not key or not signature:
            logger.warning("Webhook rejected: missing key or signature header")
            return False

        # Several secrets may share a key while it is being rotated
        matching = [c for c in self.credentials if c.key == key]
        if not matching:
            logger.warning(f"Webhook rejected: unknown key {key}")
            return False

        for candidate in matching:
            if verify(candidate.secret, raw_body, signature):
                return True

        logger.warning(f"Webhook rejected: signature mismatch for key {key}")
        return False


def validate(
    credentials_set: Union[Credentials, Iterable[Credentials]],
    headers: Mapping[str, str],
    raw_body: Union[bytes, str],
) -> bool:
    """
    Functional form of WebhookValidator.validate.

    credentials_set may be a single Credentials or a sequence whose first
    element is the primary credentials.
    """
    if isinstance(credentials_set, Credentials):
        return WebhookValidator(credentials_set).validate(headers, raw_body)
    candidates = list(credentials_set)
    if not candidates:
        return False
    return WebhookValidator(candidates[0], candidates[1:]).validate(headers, raw_body)


# ============================================================================
# Webhook Wrapper
# ============================================================================

class Webhook:
    """
    An inbound webhook request.

    Usage:
        webhook = Webhook(credentials, request.headers, await request.body())
        if not webhook.is_valid():
            return Response(status_code=401)
        for event in webhook.events:
            ...
    """

    def __init__(
        self,
        credentials: Credentials,
        headers: Mapping[str, str],
        raw_body: Union[bytes, str],
        additional_credentials: Iterable[Credentials] = (),
    ):
        self.validator = WebhookValidator(credentials, additional_credentials)
        self.headers = dict(headers)
        self.raw_body = raw_body
        self.key = _header(headers, HEADER_KEY)
        self.signature = _header(headers, HEADER_SIGNATURE)
        self.content_type = _header(headers, HEADER_CONTENT_TYPE)
        self._payload: Optional[WebhookPayload] = None
        self._payload_error: Optional[ValidationError] = None

        try:
            self._payload = parse_payload(raw_body)
        except ValidationError as e:
            self._payload_error = e

    def is_content_type_valid(self) -> bool:
        return bool(self.content_type) and self.content_type.startswith("application/json")

    def is_body_valid(self) -> bool:
        return self._payload is not None

    def is_valid(self) -> bool:
        """Content type, body shape and signature must all check out."""
        return (
            self.is_content_type_valid()
            and self.is_body_valid()
            and self.validator.validate(self.headers, self.raw_body)
        )

    @property
    def payload(self) -> WebhookPayload:
        """
        Parsed body.

        Raises:
            ValidationError: If the body could not be parsed
        """
        if self._payload is None:
            raise ValidationError(f"Invalid webhook body: {self._payload_error}")
        return self._payload

    @property
    def raw_events(self) -> List[Dict[str, Any]]:
        return self.payload.events

    @property
    def events(self) -> List[WebhookEvent]:
        return [decode_event(raw) for raw in self.payload.events]

    @property
    def time(self) -> datetime:
        """
        Webhook timestamp as an aware UTC datetime.

        Raises:
            ValidationError: If time_ms is negative or out of range, or the body is invalid
        """
        time_ms = self.payload.time_ms
        if time_ms < 0:
            raise ValidationError(f"Invalid negative webhook timestamp: {time_ms}")
        try:
            return datetime(1970, 1, 1, tzinfo=timezone.utc) + timedelta(milliseconds=time_ms)
        except (OverflowError, ValueError) as e:
            raise ValidationError(f"Webhook timestamp out of range: {time_ms}") from e

    def find_events_by_type(self, event_name: str) -> List[WebhookEvent]:
        return [e for e in self.events if e.name == event_name]

    def find_events_by_channel(self, channel: str) -> List[WebhookEvent]:
        return [e for e in self.events if getattr(e, "channel", None) == channel]
