"""
Tests for channel classification and identifier validation.
"""
import pytest

from pusher_auth.core.channels import (
    ChannelKind,
    classify,
    validate_event_name,
    validate_socket_id,
    validate_user_id,
)
from pusher_auth.core.exceptions import ConfigError, ValidationError


class TestClassify:
    """Test kind detection from channel prefixes."""

    def test_public_channel(self):
        channel = classify("my-channel")
        assert channel.kind == ChannelKind.PUBLIC
        assert channel.name == "my-channel"
        assert channel.requires_auth is False

    def test_private_channel(self):
        channel = classify("private-x")
        assert channel.kind == ChannelKind.PRIVATE
        assert channel.requires_auth is True
        assert channel.is_encrypted is False

    def test_presence_channel(self):
        channel = classify("presence-x")
        assert channel.kind == ChannelKind.PRESENCE
        assert channel.is_presence is True

    def test_private_encrypted_channel_with_master_key(self):
        """Longest prefix wins over 'private-'."""
        channel = classify("private-encrypted-x", master_key_configured=True)
        assert channel.kind == ChannelKind.PRIVATE_ENCRYPTED
        assert channel.is_encrypted is True
        assert channel.is_presence is False

    def test_presence_encrypted_channel_with_master_key(self):
        channel = classify("presence-encrypted-x", master_key_configured=True)
        assert channel.kind == ChannelKind.PRESENCE_ENCRYPTED
        assert channel.is_encrypted is True
        assert channel.is_presence is True

    def test_encrypted_channel_without_master_key_is_config_error(self):
        with pytest.raises(ConfigError, match="master key"):
            classify("private-encrypted-x")

    def test_presence_encrypted_without_master_key_is_config_error(self):
        with pytest.raises(ConfigError, match="master key"):
            classify("presence-encrypted-x")

    def test_prefix_must_be_at_start(self):
        assert classify("my-private-channel").kind == ChannelKind.PUBLIC

    def test_str_is_full_name(self):
        assert str(classify("private-room")) == "private-room"


class TestChannelNameValidation:
    """Test rejection of malformed names."""

    def test_empty_name(self):
        with pytest.raises(ValidationError, match="empty"):
            classify("")

    def test_max_length_accepted(self):
        assert classify("a" * 200).kind == ChannelKind.PUBLIC

    def test_too_long(self):
        with pytest.raises(ValidationError, match="too long"):
            classify("a" * 201)

    def test_length_checked_before_characters(self):
        with pytest.raises(ValidationError, match="too long"):
            classify(" " * 201)

    @pytest.mark.parametrize("name", ["test channel", "chan#1", "über", "a/b", "line\n"])
    def test_invalid_characters(self, name):
        with pytest.raises(ValidationError, match="Invalid channel name"):
            classify(name)

    def test_all_allowed_characters(self):
        assert classify("Az09_-=@,.;").kind == ChannelKind.PUBLIC

    def test_validation_precedes_encryption_check(self):
        """A malformed encrypted name is an input error, not a setup error."""
        with pytest.raises(ValidationError):
            classify("private-encrypted-bad name")


class TestIdentifierValidators:
    """Test socket id, user id and event name validators."""

    @pytest.mark.parametrize("socket_id", ["123.456", "1.2", "0.0"])
    def test_valid_socket_ids(self, socket_id):
        validate_socket_id(socket_id)

    @pytest.mark.parametrize("socket_id", ["", "123", "123.", ".456", "a.b", "1.2.3", "123.456\n", "123.456:x"])
    def test_invalid_socket_ids(self, socket_id):
        with pytest.raises(ValidationError, match="Invalid socket id"):
            validate_socket_id(socket_id)

    def test_empty_user_id(self):
        with pytest.raises(ValidationError):
            validate_user_id("")

    def test_valid_user_id(self):
        validate_user_id("42")

    def test_event_name_limits(self):
        validate_event_name("e" * 200)
        with pytest.raises(ValidationError, match="too long"):
            validate_event_name("e" * 201)
        with pytest.raises(ValidationError):
            validate_event_name("")
