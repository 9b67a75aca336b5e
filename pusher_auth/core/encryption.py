"""
End-to-End Channel Encryption

Authenticated encryption of event payloads for private-encrypted channels.
Uses NaCl secretbox (XSalsa20-Poly1305) via PyNaCl, which is what
subscribing clients use to decrypt.

Key derivation:
    shared_secret = SHA-256(channel_name || master_key)   (32 bytes)

The same derivation serves both the authorizer (which hands the shared
secret to subscribers) and the publish path (which encrypts with it).

SAFETY PROPERTY - NONCE UNIQUENESS:
    Every encrypt() call draws a fresh 24-byte nonce from the CSPRNG of the
    CryptoContext. A nonce must never be reused with the same key: doing so
    leaks the XOR of the plaintexts and allows forgeries. Callers cannot
    supply a nonce, and nonces are never derived from counters or state.

Wire format:
    {"nonce": "<base64 24 bytes>", "ciphertext": "<base64 ciphertext + 16-byte tag>"}
"""

import base64
import binascii
import json
import logging
from dataclasses import dataclass
from typing import Optional, Union

import nacl.exceptions
import nacl.secret

from pusher_auth.core.credentials import CryptoContext
from pusher_auth.core.exceptions import ConfigError, EncryptionError
from pusher_auth.core.secret import SecretBytes
from pusher_auth.core.signing.signer import SecretLike, derive_channel_key

logger = logging.getLogger(__name__)


NONCE_SIZE = nacl.secret.SecretBox.NONCE_SIZE  # 24
KEY_SIZE = nacl.secret.SecretBox.KEY_SIZE  # 32
MAC_SIZE = nacl.secret.SecretBox.MACBYTES  # 16


@dataclass(frozen=True)
class EncryptedPayload:
    """
    Encrypted event data.

    Attributes:
        nonce: 24 random bytes, unique per encryption
        ciphertext: Encrypted bytes including the Poly1305 tag
    """
    nonce: bytes
    ciphertext: bytes

    def to_dict(self) -> dict:
        return {
            "nonce": base64.b64encode(self.nonce).decode("ascii"),
            "ciphertext": base64.b64encode(self.ciphertext).decode("ascii"),
        }

    def to_json(self) -> str:
        """Serialize to the compact wire JSON string."""
        return json.dumps(self.to_dict(), separators=(",", ":"))

    @classmethod
    def from_dict(cls, data: dict) -> "EncryptedPayload":
        """
        Parse the wire object.

        Raises:
            EncryptionError: If a field is missing or not valid base64
        """
        if not isinstance(data, dict):
            raise EncryptionError("Encrypted payload must be a JSON object")
        try:
            nonce = base64.b64decode(data["nonce"], validate=True)
            ciphertext = base64.b64decode(data["ciphertext"], validate=True)
        except KeyError as e:
            raise EncryptionError(f"Encrypted payload is missing field {e}") from e
        except (binascii.Error, TypeError, ValueError) as e:
            raise EncryptionError(f"Encrypted payload is not valid base64: {e}") from e
        return cls(nonce=nonce, ciphertext=ciphertext)

    @classmethod
    def from_json(cls, raw: Union[str, bytes]) -> "EncryptedPayload":
        """Parse the wire JSON string."""
        try:
            data = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError, RecursionError) as e:
            raise EncryptionError(f"Encrypted payload is not valid JSON: {e}") from e
        return cls.from_dict(data)


class ChannelEncryptor:
    """
    Derives channel keys and encrypts/decrypts event payloads.

    Stateless apart from the CryptoContext; safe to share between threads.
    """

    def __init__(self, crypto: Optional[CryptoContext] = None):
        self.crypto = crypto or CryptoContext()

    @staticmethod
    def derive_shared_secret(master_key: SecretLike, channel_name: str) -> bytes:
        """
        Derive the 32-byte shared secret for a channel.

        Raises:
            ConfigError: If the master key is not 32 bytes
        """
        # Length of the bytes actually hashed, not of a str's characters
        key_length = len(master_key.encode("utf-8")) if isinstance(master_key, str) else len(master_key)
        if key_length != KEY_SIZE:
            raise ConfigError(
                f"Encryption master key must be {KEY_SIZE} bytes, got {key_length}"
            )
        return derive_channel_key(master_key, channel_name)

    def encrypt(
        self,
        master_key: SecretLike,
        channel_name: str,
        plaintext: Union[bytes, str],
    ) -> EncryptedPayload:
        """
        Encrypt plaintext for a channel with a fresh random nonce.

        Args:
            master_key: 32-byte encryption master key
            channel_name: Full encrypted channel name
            plaintext: Event data; str is encoded as UTF-8

        Returns:
            EncryptedPayload with nonce and ciphertext

        Raises:
            ConfigError: If the master key is not 32 bytes
            EncryptionError: If the cipher fails
        """
        if isinstance(plaintext, str):
            plaintext = plaintext.encode("utf-8")

        nonce = self.crypto.random_bytes(NONCE_SIZE)
        if len(nonce) != NONCE_SIZE:
            raise EncryptionError(
                f"Random source returned {len(nonce)} bytes, expected {NONCE_SIZE}"
            )

        with SecretBytes(self.derive_shared_secret(master_key, channel_name)) as key:
            try:
                box = nacl.secret.SecretBox(key.reveal())
                encrypted = box.encrypt(plaintext, nonce)
            except nacl.exceptions.CryptoError as e:
                raise EncryptionError(f"Encryption failed for channel '{channel_name}': {e}") from e

        logger.debug(f"Encrypted {len(plaintext)} bytes for channel {channel_name}")
        return EncryptedPayload(nonce=encrypted.nonce, ciphertext=encrypted.ciphertext)

    def decrypt(
        self,
        master_key: SecretLike,
        channel_name: str,
        payload: EncryptedPayload,
    ) -> bytes:
        """
        Decrypt and authenticate a payload.

        Either the full plaintext is returned or EncryptionError is raised;
        nothing partial is ever exposed.

        Raises:
            ConfigError: If the master key is not 32 bytes
            EncryptionError: If the nonce/ciphertext is malformed or the tag fails
        """
        if len(payload.nonce) != NONCE_SIZE:
            raise EncryptionError(
                f"Invalid nonce length: {len(payload.nonce)} bytes (expected {NONCE_SIZE})"
            )
        if len(payload.ciphertext) < MAC_SIZE:
            raise EncryptionError(
                f"Ciphertext too short: {len(payload.ciphertext)} bytes (minimum {MAC_SIZE})"
            )

        with SecretBytes(self.derive_shared_secret(master_key, channel_name)) as key:
            try:
                box = nacl.secret.SecretBox(key.reveal())
                return box.decrypt(payload.ciphertext, payload.nonce)
            except nacl.exceptions.CryptoError as e:
                logger.warning(f"Decryption failed for channel {channel_name}")
                raise EncryptionError(
                    f"Decryption failed for channel '{channel_name}': message forged or corrupt"
                ) from e

    def encrypt_event_data(
        self,
        master_key: SecretLike,
        channel_name: str,
        data: Union[bytes, str],
    ) -> str:
        """Encrypt event data and return the wire JSON string that replaces it."""
        return self.encrypt(master_key, channel_name, data).to_json()

    def decrypt_event_data(
        self,
        master_key: SecretLike,
        channel_name: str,
        wire_data: Union[bytes, str],
    ) -> bytes:
        """Inverse of encrypt_event_data."""
        return self.decrypt(master_key, channel_name, EncryptedPayload.from_json(wire_data))
