"""
Authorization Response Models

Pydantic models for the JSON bodies returned to subscribing clients,
plus the canonical JSON rendering that both the signature and the
returned channel_data/user_data use.
"""

import json
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from pusher_auth.core.exceptions import ValidationError


def canonical_json(data: Any) -> str:
    """
    Serialize data to compact JSON with sorted keys.

    The returned string is hashed and also handed to the client verbatim,
    so both sides agree on the exact bytes.

    Raises:
        ValidationError: If data is not JSON serializable
    """
    try:
        return json.dumps(data, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Data is not JSON serializable: {e}") from e


class SocketAuthResult(BaseModel):
    """Response to a channel subscription authorization request."""
    model_config = ConfigDict(frozen=True)

    auth: str = Field(..., description="'{key}:{hex signature}'")
    channel_data: Optional[str] = Field(None, description="Canonical presence JSON (presence channels)")
    shared_secret: Optional[str] = Field(None, description="Base64 channel key (encrypted channels)")

    def to_dict(self) -> Dict[str, str]:
        """Wire representation with absent fields omitted."""
        return self.model_dump(exclude_none=True)


class UserAuthResult(BaseModel):
    """Response to a user authentication request."""
    model_config = ConfigDict(frozen=True)

    auth: str = Field(..., description="'{key}:{hex signature}'")
    user_data: str = Field(..., description="Canonical user JSON")

    def to_dict(self) -> Dict[str, str]:
        return self.model_dump()
