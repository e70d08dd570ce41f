"""
Copyright (c) 2020, the SDAR developers
See LICENSE for details

A tiny JSON-over-HTTP client built on urllib.
"""

import json
from ssl import SSLContext
from typing import Dict, List, Optional, Union
import urllib.error
import urllib.request as urlrequest

from sdar import SdarError

from .helpers import formatTraceback


class HTTPError(SdarError):
    """
    The server answered with an HTTP error status.
    """

    def __init__(self, url: str, code: int, reason: str):
        super().__init__(f"HTTP {code} ({reason}) from {url}")
        self.url = url
        self.code = code
        self.reason = reason


def get(url: str, **kwargs) -> Union[Dict[str, str], List[int], str]:
    """
    A convenience function to make a GET HTTP request.

    Args:
        url: The URL to connect to.
        kwargs: Other arguments to pass to the request function.
    """
    return request(url, **kwargs)


def request(
    url: str,
    headers: Optional[Dict[str, str]] = None,
    context: Optional[SSLContext] = None,
    timeout: Optional[float] = None,
) -> Union[Dict[str, str], List[int], str]:
    """
    Make an HTTP GET request and try to decode the payload as JSON. If an error
    happens while decoding, return the raw payload.

    Args:
        url: The URL to connect to.
        headers: Any custom headers to add to the request.
        context: An SSLContext used to encrypt the request.
        timeout: Socket timeout in seconds. None means the global default.

    Returns:
        The decoded JSON data or the raw payload.

    Raises:
        HTTPError: The server responded with an error status.
        SdarError: Any other failure to complete the request.
    """
    headers = headers if headers else {}
    req = urlrequest.Request(url, headers=headers)

    kwargs = {"context": context}
    if timeout is not None:
        kwargs["timeout"] = timeout
    try:
        raw = urlrequest.urlopen(req, **kwargs).read().decode()
    except urllib.error.HTTPError as err:
        raise HTTPError(url, err.code, str(err.reason))
    except Exception as err:
        raise SdarError(f"Error in requesting URL {url}: {formatTraceback(err)}")

    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw
