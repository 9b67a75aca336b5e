"""
Shared fixtures for pusher_auth tests.
"""
import base64

import pytest

from pusher_auth.core.credentials import Credentials


APP_ID = "1234"
APP_KEY = "278d425bdf160c739803"
APP_SECRET = "7ad3773142a6692b25b8"
# "this is a 32 byte long secret!!!"
MASTER_KEY_B64 = "dGhpcyBpcyBhIDMyIGJ5dGUgbG9uZyBzZWNyZXQhISE="


@pytest.fixture
def socket_id():
    return "123.456"


@pytest.fixture
def master_key():
    return base64.b64decode(MASTER_KEY_B64)


@pytest.fixture
def credentials():
    """Credentials without an encryption master key."""
    return Credentials.create(app_id=APP_ID, key=APP_KEY, secret=APP_SECRET)


@pytest.fixture
def encrypted_credentials():
    """Credentials with an encryption master key."""
    return Credentials.create(
        app_id=APP_ID,
        key=APP_KEY,
        secret=APP_SECRET,
        master_key_base64=MASTER_KEY_B64,
    )
