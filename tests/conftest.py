"""
Pytest configuration and fixtures for Blitline client tests.
"""

import json

import pytest
import requests

from blitline_client.configuration import BlitlineConfig
from blitline_client.service import BlitlineImageService


def make_response(status_code=200, body=None, text=None):
    """Build a real requests.Response without touching the network."""
    response = requests.Response()
    response.status_code = status_code
    response.reason = "OK" if status_code < 400 else "Error"
    response.encoding = "utf-8"
    if text is None:
        text = json.dumps(body if body is not None else {})
    response._content = text.encode("utf-8")
    response.url = "http://api.blitline.test/job"
    return response


class FakeSession:
    """Stands in for requests.Session; records posts and replays queued responses."""

    def __init__(self):
        self.calls = []
        self.responses = []
        self.error = None

    def queue(self, status_code=200, body=None, text=None):
        self.responses.append(make_response(status_code, body, text))

    def post(self, url, json=None, timeout=None, **kwargs):
        self.calls.append({"url": url, "json": json, "timeout": timeout})
        if self.error is not None:
            raise self.error
        return self.responses.pop(0)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep developer BLITLINE_* settings out of the tests."""
    for var in [
        "BLITLINE_CONFIG",
        "BLITLINE_APPLICATION_ID",
        "BLITLINE_S3_SOURCE_BUCKET",
        "BLITLINE_ALWAYS_EXTENDED_METADATA",
        "BLITLINE_SUBMIT_URL",
        "BLITLINE_TIMEOUT",
    ]:
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def config():
    return BlitlineConfig(
        application_id="test-app-id",
        s3_source_bucket="mybucket",
        submit_url="http://api.blitline.test/job",
    )


@pytest.fixture
def fake_session():
    return FakeSession()


@pytest.fixture
def service(config, fake_session):
    return BlitlineImageService(config, session=fake_session)


@pytest.fixture
def accepted_body():
    return {
        "results": {
            "job_id": "4a7b9c",
            "images": [{"image_identifier": "photo.gray", "s3_url": "https://s3.amazonaws.com/dest/gray.jpg"}],
        }
    }
