"""
Canonical Signer

Single place where keyed hashes are computed and compared. Every other
component signs through sign()/verify() so the hash choice (HMAC-SHA256)
and the comparison discipline (constant time) are enforced here.

Signature format: 64 lowercase hex characters.
"""

import hashlib
import hmac
import logging
from typing import Union

from pusher_auth.core.exceptions import SigningError
from pusher_auth.core.secret import SecretBytes

logger = logging.getLogger(__name__)


SecretLike = Union[SecretBytes, bytes, str]


def _key_bytes(secret: SecretLike) -> bytes:
    if isinstance(secret, SecretBytes):
        return secret.reveal()
    if isinstance(secret, str):
        return secret.encode("utf-8")
    return bytes(secret)


def _message_bytes(message: Union[bytes, str]) -> bytes:
    if isinstance(message, str):
        return message.encode("utf-8")
    return bytes(message)


def sign(secret: SecretLike, message: Union[bytes, str]) -> str:
    """
    Compute the hex-encoded HMAC-SHA256 of message.

    Args:
        secret: App secret (or any HMAC key)
        message: Canonical byte string; str is encoded as UTF-8

    Returns:
        64-character lowercase hex digest

    Raises:
        SigningError: If the keyed hash cannot be computed
    """
    try:
        return hmac.new(_key_bytes(secret), _message_bytes(message), hashlib.sha256).hexdigest()
    except (TypeError, ValueError) as e:
        logger.error(f"HMAC computation failed: {type(e).__name__}")
        raise SigningError(f"Failed to compute signature: {e}") from e


def verify(secret: SecretLike, message: Union[bytes, str], signature_hex: str) -> bool:
    """
    Check a hex signature against the recomputed one in constant time.

    Comparison time does not depend on where the first mismatch is.
    Non-ASCII or non-string signatures simply fail.
    """
    if not isinstance(signature_hex, str):
        return False
    expected = sign(secret, message)
    try:
        supplied = signature_hex.encode("ascii")
    except UnicodeEncodeError:
        return False
    return hmac.compare_digest(expected.encode("ascii"), supplied)


def derive_channel_key(master_key: SecretLike, channel_name: str) -> bytes:
    """
    Derive the 32-byte shared secret for an encrypted channel.

    shared_secret = SHA-256(channel_name || master_key)

    Must stay identical to what subscribing clients compute, so that a
    client handed the shared secret at authorization can decrypt events
    published on the channel.
    """
    digest = hashlib.sha256()
    digest.update(channel_name.encode("utf-8"))
    digest.update(_key_bytes(master_key))
    return digest.digest()
