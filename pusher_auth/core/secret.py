"""
Secret Material Wrapper

Holds key material (app secret, encryption master key, derived channel keys)
in a mutable buffer that can be overwritten in place.

Wiping happens:
- explicitly via wipe()
- when leaving a `with` block
- when the object is garbage collected

CPython cannot scrub the immutable `bytes` copies that hash and cipher
libraries require, so zeroing is best-effort: the long-lived buffer is
scrubbed, short-lived copies are dropped as soon as the call returns.
"""

from typing import Union

from pusher_auth.core.exceptions import ConfigError


class SecretBytes:
    """
    Wipe-on-drop container for secret bytes.

    Usage:
        with SecretBytes(derived_key) as key:
            box = SecretBox(key.reveal())
        # buffer is zeroed here
    """

    __slots__ = ("_buffer", "_wiped")

    def __init__(self, value: Union[bytes, bytearray, str]):
        if isinstance(value, str):
            value = value.encode("utf-8")
        elif not isinstance(value, (bytes, bytearray, memoryview)):
            raise ConfigError(
                f"Secret material must be bytes or str, got {type(value).__name__}"
            )
        self._buffer = bytearray(value)
        self._wiped = False

    def reveal(self) -> bytes:
        """
        Return a copy of the secret for handing to a crypto primitive.

        Raises:
            ConfigError: If the secret has already been wiped
        """
        if self._wiped:
            raise ConfigError("Secret material has been wiped and can no longer be used")
        return bytes(self._buffer)

    def wipe(self) -> None:
        """Overwrite the buffer with zeros."""
        for i in range(len(self._buffer)):
            self._buffer[i] = 0
        self._wiped = True

    @property
    def is_wiped(self) -> bool:
        return self._wiped

    def __len__(self) -> int:
        return len(self._buffer)

    def __enter__(self) -> "SecretBytes":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.wipe()

    def __del__(self):
        # Interpreter shutdown can tear down attributes first
        buffer = getattr(self, "_buffer", None)
        if buffer is not None:
            for i in range(len(buffer)):
                buffer[i] = 0

    def __eq__(self, other) -> bool:
        return NotImplemented

    __hash__ = None

    def __repr__(self) -> str:
        state = "wiped" if self._wiped else f"{len(self._buffer)} bytes"
        return f"SecretBytes([REDACTED], {state})"

    __str__ = __repr__
