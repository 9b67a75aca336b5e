"""
Request Authentication

Signs outbound REST API calls (trigger, batch trigger, channel queries).

Canonical Request Format:
    {METHOD}\n{path}\n{sorted_query_string}

Where sorted_query_string is every query parameter, including
auth_key, auth_timestamp, auth_version and (for requests with a body)
body_md5, sorted by key and joined as key=value pairs with '&'.
The resulting HMAC-SHA256 is appended as auth_signature.
"""

import hashlib
import logging
import time
from typing import Dict, Mapping, Optional, Union

from pusher_auth.core.credentials import Credentials
from pusher_auth.core.signing.signer import sign

logger = logging.getLogger(__name__)


AUTH_VERSION = "1.0"

# Reserved parameter names produced by the signer
PARAM_AUTH_KEY = "auth_key"
PARAM_AUTH_TIMESTAMP = "auth_timestamp"
PARAM_AUTH_VERSION = "auth_version"
PARAM_BODY_MD5 = "body_md5"
PARAM_AUTH_SIGNATURE = "auth_signature"


def body_md5(body: Union[bytes, str]) -> str:
    """
    Compute the MD5 checksum of a request body.

    Wire-protocol compatibility only; it provides no integrity on its own.

    Returns:
        32 lowercase hex characters
    """
    if isinstance(body, str):
        body = body.encode("utf-8")
    return hashlib.md5(body).hexdigest()


def create_canonical_request(method: str, path: str, params: Mapping[str, str]) -> str:
    """
    Build the canonical string to sign.

    Keys are ordered by their UTF-8 byte value.

    Example:
        >>> create_canonical_request("post", "/apps/3/events", {"b": "2", "a": "1"})
        'POST\\n/apps/3/events\\na=1&b=2'
    """
    query_string = "&".join(
        f"{key}={params[key]}" for key in sorted(params, key=lambda k: k.encode("utf-8"))
    )
    return f"{method.upper()}\n{path}\n{query_string}"


def authenticate(
    credentials: Credentials,
    method: str,
    path: str,
    query_params: Optional[Mapping[str, object]] = None,
    body: Optional[Union[bytes, str]] = None,
    timestamp: Optional[int] = None,
) -> Dict[str, str]:
    """
    Produce the signed query parameters for an API request.

    Args:
        credentials: App credentials
        method: HTTP method; upper-cased before signing
        path: Request path, e.g. "/apps/123/events" (used verbatim)
        query_params: Extra caller parameters (e.g. "info")
        body: Request body; None for body-less requests (no body_md5 added)
        timestamp: Unix seconds; defaults to now

    Returns:
        All query parameters including auth_signature

    Example:
        >>> params = authenticate(creds, "POST", "/apps/123/events", body=b'{"name":"x"}')
        >>> sorted(params)
        ['auth_key', 'auth_signature', 'auth_timestamp', 'auth_version', 'body_md5']
    """
    if timestamp is None:
        timestamp = int(time.time())

    params: Dict[str, str] = {}
    if query_params:
        params.update({str(k): str(v) for k, v in query_params.items()})

    params[PARAM_AUTH_KEY] = credentials.key
    params[PARAM_AUTH_TIMESTAMP] = str(timestamp)
    params[PARAM_AUTH_VERSION] = AUTH_VERSION
    if body is not None:
        params[PARAM_BODY_MD5] = body_md5(body)
    # A stale signature from the caller must never leak into the signed set
    params.pop(PARAM_AUTH_SIGNATURE, None)

    canonical = create_canonical_request(method, path, params)
    params[PARAM_AUTH_SIGNATURE] = sign(credentials.secret, canonical)

    logger.debug(f"Signed {method.upper()} {path} at {timestamp}")
    return params


def signed_query_string(
    credentials: Credentials,
    method: str,
    path: str,
    query_params: Optional[Mapping[str, object]] = None,
    body: Optional[Union[bytes, str]] = None,
    timestamp: Optional[int] = None,
) -> str:
    """
    Render authenticate() as a query string.

    Parameters appear in signing order with auth_signature last.
    """
    params = authenticate(credentials, method, path, query_params, body, timestamp)
    signature = params.pop(PARAM_AUTH_SIGNATURE)
    ordered = sorted(params, key=lambda k: k.encode("utf-8"))
    query_string = "&".join(f"{key}={params[key]}" for key in ordered)
    return f"{query_string}&{PARAM_AUTH_SIGNATURE}={signature}"
