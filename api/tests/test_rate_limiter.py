"""Rate limit identity: which address a request is bucketed under."""

import pytest
from starlette.requests import Request

from rankedin.middleware.rate_limiter import client_key

PROXY = "10.1.0.2"


def _request(peer: str, forwarded: str | None = None) -> Request:
    headers = []
    if forwarded is not None:
        headers.append((b"x-forwarded-for", forwarded.encode()))
    return Request({"type": "http", "headers": headers, "client": (peer, 51234)})


class TestClientKey:
    def test_socket_peer_without_header(self):
        assert client_key(_request("198.51.100.7")) == "198.51.100.7"

    @pytest.mark.parametrize("forwarded", ["10.0.0.1", "10.0.0.1, 10.0.0.2", "spoofed"])
    def test_header_ignored_without_trusted_proxies(self, forwarded):
        assert client_key(_request("198.51.100.7", forwarded)) == "198.51.100.7"

    def test_header_ignored_when_peer_is_not_a_trusted_proxy(self):
        request = _request("198.51.100.7", "203.0.113.9")

        assert client_key(request, [PROXY]) == "198.51.100.7"

    def test_trusted_proxy_uses_hop_it_appended(self):
        request = _request(PROXY, "203.0.113.9")

        assert client_key(request, [PROXY]) == "203.0.113.9"

    def test_client_written_hops_are_skipped(self):
        # The client prepended a fake address; the proxy appended the real one
        request = _request(PROXY, "10.0.0.1, 203.0.113.9")

        assert client_key(request, [PROXY]) == "203.0.113.9"

    def test_chained_trusted_proxies_are_skipped(self):
        request = _request(PROXY, "203.0.113.9, 10.1.0.3")

        assert client_key(request, [PROXY, "10.1.0.3"]) == "203.0.113.9"

    def test_trusted_proxy_without_header_keys_on_proxy(self):
        assert client_key(_request(PROXY), [PROXY]) == PROXY

    def test_missing_client(self):
        request = Request({"type": "http", "headers": [], "client": None})

        assert client_key(request) == "unknown"
