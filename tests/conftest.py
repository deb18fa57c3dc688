"""Pytest fixtures for the PowerFlex client tests.

HTTP is faked by handing the client a stand-in for requests.Session whose
request() answers from a routing table; no network access is needed.
"""

import pytest

from helpers import ENDPOINT, FakeHTTPSession, login_ok
from mgmt.client import Client
from shared.timing import set_time_recorder


@pytest.fixture
def http():
    return FakeHTTPSession()


@pytest.fixture
def client(http):
    """Client with stored credentials and a known API version"""
    return Client(ENDPOINT, version="3.6", username="admin", password="secret", http_session=http)


@pytest.fixture
def authed_client(client, http):
    """Client already holding TOKEN-1; call log cleared"""
    http.replace("GET", "/api/login", login_ok("TOKEN-1"))
    client.authenticate()
    http.calls.clear()
    return client


@pytest.fixture
def recorded_times():
    """Collect (operation, elapsed) pairs from the time recorder hook"""
    records = []
    set_time_recorder(lambda name, elapsed: records.append((name, elapsed)))
    yield records
    set_time_recorder(None)
