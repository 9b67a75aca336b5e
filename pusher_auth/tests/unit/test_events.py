"""
Tests for trigger and batch trigger payload construction.
"""
import json

import pytest

from pusher_auth.core.encryption import ChannelEncryptor, EncryptedPayload
from pusher_auth.core.events import (
    BatchEvent,
    TriggerPayloadBuilder,
    serialize_event_data,
    terminate_user_connections_path,
)
from pusher_auth.core.exceptions import ConfigError, ValidationError


@pytest.fixture
def builder(credentials):
    return TriggerPayloadBuilder(credentials)


@pytest.fixture
def encrypted_builder(encrypted_credentials):
    return TriggerPayloadBuilder(encrypted_credentials)


class TestSerializeEventData:

    def test_string_passes_through(self):
        assert serialize_event_data('{"already":"json"}') == '{"already":"json"}'

    def test_json_value_is_compact(self):
        assert serialize_event_data({"a": [1, 2]}) == '{"a":[1,2]}'

    def test_not_serializable(self):
        with pytest.raises(ValidationError):
            serialize_event_data({1, 2})


class TestTrigger:
    """Test single trigger bodies."""

    def test_plain_trigger(self, builder):
        body = builder.trigger(["my-channel", "private-other"], "my-event", {"message": "hi"})
        assert body == {
            "name": "my-event",
            "data": '{"message":"hi"}',
            "channels": ["my-channel", "private-other"],
        }

    def test_single_channel_string(self, builder):
        assert builder.trigger("my-channel", "e", "x")["channels"] == ["my-channel"]

    def test_optional_params(self, builder):
        body = builder.trigger(["my-channel"], "e", "x", socket_id="1.2", info="subscription_count")
        assert body["socket_id"] == "1.2"
        assert body["info"] == "subscription_count"

    def test_invalid_socket_id(self, builder):
        with pytest.raises(ValidationError, match="socket id"):
            builder.trigger(["my-channel"], "e", "x", socket_id="nope")

    def test_event_name_too_long(self, builder):
        with pytest.raises(ValidationError, match="too long"):
            builder.trigger(["my-channel"], "e" * 201, "x")

    def test_channel_limits(self, builder):
        builder.trigger([f"c{i}" for i in range(100)], "e", "x")
        with pytest.raises(ValidationError, match="more than 100"):
            builder.trigger([f"c{i}" for i in range(101)], "e", "x")
        with pytest.raises(ValidationError, match="At least one"):
            builder.trigger([], "e", "x")

    def test_invalid_channel_name(self, builder):
        with pytest.raises(ValidationError):
            builder.trigger(["bad channel"], "e", "x")

    def test_encrypted_channel_data_is_encrypted(self, encrypted_builder, master_key):
        body = encrypted_builder.trigger(["private-encrypted-room"], "e", {"secret": "plan"})
        assert body["channels"] == ["private-encrypted-room"]
        wire = json.loads(body["data"])
        assert set(wire) == {"nonce", "ciphertext"}
        plaintext = ChannelEncryptor().decrypt(
            master_key, "private-encrypted-room", EncryptedPayload.from_dict(wire)
        )
        assert plaintext == b'{"secret":"plan"}'

    def test_encrypted_channel_with_others_rejected(self, encrypted_builder):
        with pytest.raises(ValidationError, match="multiple channels"):
            encrypted_builder.trigger(["private-encrypted-a", "my-channel"], "e", "x")

    def test_two_encrypted_channels_rejected(self, encrypted_builder):
        with pytest.raises(ValidationError, match="multiple channels"):
            encrypted_builder.trigger(["private-encrypted-a", "private-encrypted-b"], "e", "x")

    def test_encrypted_channel_without_master_key(self, builder):
        with pytest.raises(ConfigError):
            builder.trigger(["private-encrypted-room"], "e", "x")


class TestTriggerBatch:
    """Test batch trigger bodies."""

    def test_batch(self, builder):
        body = builder.trigger_batch([
            BatchEvent(name="e1", channel="a", data="one"),
            BatchEvent(name="e2", channel="private-b", data={"n": 2}, socket_id="1.2", info="user_count"),
        ])
        assert body == {"batch": [
            {"name": "e1", "channel": "a", "data": "one"},
            {"name": "e2", "channel": "private-b", "data": '{"n":2}', "socket_id": "1.2", "info": "user_count"},
        ]}

    def test_batch_limits(self, builder):
        builder.trigger_batch([BatchEvent(name="e", channel="a", data="x")] * 10)
        with pytest.raises(ValidationError, match="max 10"):
            builder.trigger_batch([BatchEvent(name="e", channel="a", data="x")] * 11)
        with pytest.raises(ValidationError, match="empty"):
            builder.trigger_batch([])

    def test_each_encrypted_event_uses_its_channel_key(self, encrypted_builder, master_key):
        body = encrypted_builder.trigger_batch([
            BatchEvent(name="e", channel="private-encrypted-a", data="for a"),
            BatchEvent(name="e", channel="private-encrypted-b", data="for b"),
            BatchEvent(name="e", channel="public", data="clear"),
        ])
        encryptor = ChannelEncryptor()
        first, second, third = body["batch"]
        assert encryptor.decrypt_event_data(master_key, "private-encrypted-a", first["data"]) == b"for a"
        assert encryptor.decrypt_event_data(master_key, "private-encrypted-b", second["data"]) == b"for b"
        assert third["data"] == "clear"

    def test_invalid_event_in_batch(self, builder):
        with pytest.raises(ValidationError):
            builder.trigger_batch([BatchEvent(name="e", channel="a", data="x", socket_id="bad")])


class TestUserEvents:

    def test_send_to_user(self, builder):
        body = builder.send_to_user("42", "notice", {"msg": "hi"})
        assert body == {"name": "notice", "data": '{"msg":"hi"}', "channels": ["#server-to-user-42"]}

    def test_send_to_user_requires_id(self, builder):
        with pytest.raises(ValidationError):
            builder.send_to_user("", "notice", "x")

    def test_terminate_path(self):
        assert terminate_user_connections_path("42") == "/users/42/terminate_connections"
        with pytest.raises(ValidationError):
            terminate_user_connections_path("")
