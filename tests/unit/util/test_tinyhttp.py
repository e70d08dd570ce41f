"""
Copyright (c) 2020, the SDAR developers
See LICENSE for details
"""

import io
import urllib.error
import urllib.request as urlrequest

import pytest

from sdar import SdarError
from sdar.util import tinyhttp


@pytest.fixture
def urlopen(monkeypatch):
    """
    Tests will use the returned "queue" function to add responses they want
    returned from "urllib.request.urlopen" when used in tinyhttp.
    """
    q = {}
    seen = []

    def mock_urlopen(req, context=None, timeout=None):
        """
        Args:
            req: an object with a "full_url" attribute, for instance
                urllib.request.Request.
        Return:
            an object with "read" and "decode" methods, for instance
                http.client.HTTPResponse.
        """

        class Response(str):
            read = lambda self: self
            decode = lambda self: self

        seen.append((req, timeout))
        return Response(q[req.full_url].pop())

    monkeypatch.setattr(urlrequest, "urlopen", mock_urlopen)

    def queue(url, reply=""):
        q.setdefault(url, []).append(reply)

    queue.seen = seen
    return queue


def test_get(urlopen):
    urlopen("http://example.org/", "[0, 1, 2]")
    assert tinyhttp.get("http://example.org/") == [0, 1, 2]


def test_get_headers_timeout(urlopen):
    urlopen("http://example.org/", '{"c": "d"}')
    res = tinyhttp.get("http://example.org/", headers={"X-Test": "1"}, timeout=2.5)
    assert res == {"c": "d"}
    req, timeout = urlopen.seen[0]
    assert req.get_header("X-test") == "1"
    assert timeout == 2.5


def test_request_json_decode_error(urlopen):
    urlopen("http://example.org/", "nojson")
    assert tinyhttp.request("http://example.org/") == "nojson"


def test_request_urlopen_error(monkeypatch):
    def urlopen_error(req, context=None, timeout=None):
        raise OSError("test error")

    monkeypatch.setattr(urlrequest, "urlopen", urlopen_error)
    with pytest.raises(SdarError) as excinfo:
        tinyhttp.get("http://example.org/")
    assert not isinstance(excinfo.value, tinyhttp.HTTPError)


def test_request_http_error(monkeypatch):
    def urlopen_404(req, context=None, timeout=None):
        raise urllib.error.HTTPError(
            req.full_url, 404, "Not Found", {}, io.BytesIO(b"")
        )

    monkeypatch.setattr(urlrequest, "urlopen", urlopen_404)
    with pytest.raises(tinyhttp.HTTPError) as excinfo:
        tinyhttp.get("http://example.org/missing")
    assert excinfo.value.code == 404
    assert excinfo.value.url == "http://example.org/missing"
