"""
Copyright (c) 2020, the SDAR developers
See LICENSE for details

A minimal Horizon client. HorizonClient.account is the account lookup used to
scan voting addresses.
"""

from urllib.parse import quote, urljoin, urlsplit, urlunsplit

from sdar import SdarError
from sdar.util import tinyhttp
from sdar.util.helpers import getLogger

from .account import Account, AccountError


log = getLogger("HORIZON")

VERSION = "0.1.0"
GET_HEADERS = {"User-Agent": "sdar/%s" % VERSION, "Accept": "application/json"}

HTTP_NOT_FOUND = 404


class LookupFailed(SdarError):
    """
    An account could not be fetched or its data could not be understood.
    """

    pass


class HorizonClient:
    """
    HorizonClient fetches account snapshots from a Horizon server.
    """

    def __init__(self, url, timeout=None):
        """
        Args:
            url (str): The Horizon server URL, e.g. https://horizon.stellar.org/.
            timeout (float): Request timeout in seconds. None uses the socket
                default.
        """
        parts = urlsplit(url)
        if not parts.scheme or not parts.netloc:
            raise SdarError(f"invalid Horizon URL {url!r}")
        path = parts.path if parts.path.endswith("/") else parts.path + "/"
        self.baseURL = urlunsplit((parts.scheme, parts.netloc, path, "", ""))
        self.timeout = timeout

    def accountURL(self, address):
        return urljoin(self.baseURL, "accounts/" + quote(address, safe=""))

    def account(self, address):
        """
        Fetch the account at address. An address that Horizon doesn't know is
        returned as an unfunded Account rather than an error.

        Args:
            address (str): The account's public key.

        Returns:
            Account: The account snapshot.

        Raises:
            LookupFailed: The request failed or the response was not account
                data.
        """
        url = self.accountURL(address)
        try:
            res = tinyhttp.get(url, headers=GET_HEADERS, timeout=self.timeout)
        except tinyhttp.HTTPError as err:
            if err.code == HTTP_NOT_FOUND:
                log.debug(f"no account at {address}")
                return Account.unfunded(address)
            raise LookupFailed(f"account lookup for {address} failed: {err}")
        except SdarError as err:
            raise LookupFailed(f"account lookup for {address} failed: {err}")

        try:
            acct = Account.parse(res)
        except AccountError as err:
            raise LookupFailed(f"unexpected account data for {address}: {err}")
        if acct.accountId != address:
            raise LookupFailed(
                f"requested account {address}, received {acct.accountId}"
            )
        return acct

    def __call__(self, address):
        return self.account(address)
