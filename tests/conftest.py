import os

import pytest

# app.main loads settings at import time.
os.environ.setdefault("S3_BUCKET", "test-bucket")
os.environ.setdefault("S3_REGION", "us-east-1")
os.environ.setdefault("S3_ACCESS_KEY_ID", "test-key")
os.environ.setdefault("S3_SECRET_ACCESS_KEY", "test-secret")

from app.config import load_settings  # noqa: E402
from tests.doubles import RecordingBuilder  # noqa: E402


@pytest.fixture
def settings():
    return load_settings()


@pytest.fixture
def builder():
    return RecordingBuilder()
