"""Tests for mgmt.session: version derivation, headers and the shared state lock."""

import threading

import pytest

from mgmt.session import ConnectionConfig, SessionState, base_url_for, build_headers, derive_version


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("3.6", "3.6"),
        ("3.6.700.103", "3.6"),
        ("4.0.1-beta", "4.0"),
        ("10.25.3", "10.25"),
        ("R3_6.0", "R3_6.0"),
        ("latest", "latest"),
        ("", ""),
    ],
)
def test_derive_version(raw, expected):
    assert derive_version(raw) == expected


def test_build_headers_with_version():
    headers = build_headers("3.6")
    assert headers == {
        "Accept": "application/json;version=3.6",
        "Content-Type": "application/json;version=3.6",
    }


def test_build_headers_without_version():
    headers = build_headers("")
    assert headers["Accept"] == "application/json"
    assert headers["Content-Type"] == "application/json"


def test_connection_config_repr_hides_password():
    config = ConnectionConfig(endpoint="https://gw", username="admin", password="hunter2")
    assert "hunter2" not in repr(config)
    assert config.has_credentials


def test_set_version_recomputes_headers():
    state = SessionState(ConnectionConfig(endpoint="https://gw"))
    assert state.current_headers()["Accept"] == "application/json"

    state.set_version("4.5")

    assert state.version == "4.5"
    assert state.current_headers()["Content-Type"] == "application/json;version=4.5"


def test_configure_same_endpoint_keeps_token():
    state = SessionState(ConnectionConfig(endpoint="https://gw", version="3.5"))
    state.set_token("abc")

    state.configure("https://gw", "4.0", "u", "p")

    assert state.config == ConnectionConfig("https://gw", "4.0", "u", "p")
    assert state.current_headers()["Accept"].endswith("version=4.0")
    assert state.token == "abc"


def test_configure_new_endpoint_drops_token():
    state = SessionState(ConnectionConfig(endpoint="https://gw/api", version="3.5"))
    state.set_token("abc")

    state.configure("https://other", "4.0", "u", "p")

    snap = state.snapshot()
    assert snap.base_url == "https://other"
    assert snap.token == ""
    assert snap.headers["Accept"].endswith("version=4.0")


def test_snapshot_returns_a_copy():
    state = SessionState(ConnectionConfig(endpoint="https://gw", version="3.6"))
    state.set_token("tok")

    base_url, headers, token = state.snapshot()
    headers["Accept"] = "tampered"

    assert base_url == "https://gw"
    assert token == "tok"
    assert state.current_headers()["Accept"] == "application/json;version=3.6"


def test_clear_token():
    state = SessionState(ConnectionConfig(endpoint="https://gw"))
    state.set_token("tok")
    state.clear_token()
    assert state.token == ""


def test_concurrent_version_changes_never_tear_headers():
    state = SessionState(ConnectionConfig(endpoint="https://gw", version="3.5"))
    stop = threading.Event()
    torn = []

    def writer():
        versions = ["3.5", "4.0", "", "10.2"]
        i = 0
        while not stop.is_set():
            state.set_version(versions[i % len(versions)])
            state.set_token(f"token-{i}")
            i += 1

    def reader():
        for _ in range(5000):
            _, headers, _ = state.snapshot()
            if headers["Accept"] != headers["Content-Type"]:
                torn.append(headers)
            single = state.current_headers()
            if single["Accept"] != single["Content-Type"]:
                torn.append(single)

    writers = [threading.Thread(target=writer) for _ in range(2)]
    readers = [threading.Thread(target=reader) for _ in range(4)]
    for t in writers + readers:
        t.start()
    for t in readers:
        t.join()
    stop.set()
    for t in writers:
        t.join()

    assert torn == []


@pytest.mark.parametrize(
    "endpoint, base",
    [
        ("https://gw.test", "https://gw.test"),
        ("https://gw.test/api/", "https://gw.test"),
        ("http://gw.test:8443/proxy/api", "http://gw.test:8443/proxy"),
    ],
)
def test_base_url_for(endpoint, base):
    assert base_url_for(endpoint) == base


def test_concurrent_reconfigure_never_pairs_token_with_other_endpoint():
    gateways = {"https://gw-a": "token-a", "https://gw-b": "token-b"}
    state = SessionState(ConnectionConfig(endpoint="https://gw-a"))
    state.set_token("token-a")
    stop = threading.Event()
    mismatched = []

    def reconfigure():
        i = 0
        while not stop.is_set():
            endpoint = list(gateways)[i % 2]
            state.configure(endpoint, "", "u", "p")
            state.set_token(gateways[endpoint])
            i += 1

    def reader():
        for _ in range(5000):
            snap = state.snapshot()
            if snap.token and gateways[snap.base_url] != snap.token:
                mismatched.append(snap)

    writer = threading.Thread(target=reconfigure)
    readers = [threading.Thread(target=reader) for _ in range(4)]
    writer.start()
    for t in readers:
        t.start()
    for t in readers:
        t.join()
    stop.set()
    writer.join()

    assert mismatched == []
