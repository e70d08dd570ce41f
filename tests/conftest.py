"""
Copyright (c) 2020, the SDAR developers
See LICENSE for details
"""

from decimal import Decimal
import threading

import pytest

from sdar.crypto import strkey
from sdar.stellar.account import Account, Balance, Signer
from sdar.stellar.asset import VOTE_CODE, VOTE_ISSUER, Asset
from sdar.util import helpers


# Issuer key with raw bytes 0x00, 0x01, ... 0x1f.
ISSUER = "GAAACAQDAQCQMBYIBEFAWDANBYHRAEISCMKBKFQXDAMRUGY4DUPB7JZX"


@pytest.fixture(scope="module")
def prepareLogger(request):
    helpers.prepareLogging()


@pytest.fixture
def asset():
    return Asset("USD", ISSUER)


class Ledger:
    """
    An in-memory account lookup. Addresses without an account are returned
    unfunded. Every lookup is recorded in calls.
    """

    def __init__(self):
        self.accounts = {}
        self.calls = []
        self.mtx = threading.Lock()

    def __call__(self, address):
        with self.mtx:
            self.calls.append(address)
        return self.accounts.get(address, Account.unfunded(address))

    def add(self, acct):
        self.accounts[acct.accountId] = acct
        return acct


@pytest.fixture
def ledger():
    return Ledger()


@pytest.fixture
def makeAccount():
    def _makeAccount(
        address,
        asset=None,
        votes=None,
        signers=None,
        native="10",
    ):
        """
        Build a funded account. The account trusts asset if provided, trusts
        VOTE with a balance of votes if votes is not None, and by default has
        its own key as the only signer at weight 0.
        """
        balances = [Balance(None, None, Decimal(native))]
        if asset is not None:
            balances.append(Balance(asset.code, asset.issuer, Decimal("1")))
        if votes is not None:
            balances.append(Balance(VOTE_CODE, VOTE_ISSUER, Decimal(votes)))
        if signers is None:
            signers = [Signer(address, 0)]
        return Account(
            address, balance=Decimal(native), balances=balances, signers=signers,
        )

    return _makeAccount


@pytest.fixture
def randKey():
    counter = [0]

    def _randKey():
        counter[0] += 1
        return strkey.encodePublicKey(bytes([counter[0]]) * 32)

    return _randKey
