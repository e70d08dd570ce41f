"""
Copyright (c) 2020, the SDAR developers
See LICENSE for details

Read-only snapshots of Stellar accounts, parsed from the account JSON served
by Horizon at /accounts/{account_id}.
"""

from decimal import Decimal, InvalidOperation

from sdar import SdarError


NATIVE_ASSET_TYPE = "native"


class AccountError(SdarError):
    """
    Account data is missing a required field or has a malformed value.
    """

    pass


def parseAmount(v):
    """
    Convert a ledger amount to a Decimal. Horizon serves amounts as fixed-point
    strings, e.g. "10.0000000". Floats are converted through their shortest
    string form so that 0.1 stays 0.1.

    Args:
        v (str, int, float, Decimal, or None): The amount.

    Returns:
        Decimal or None: The amount, or None if v is None.
    """
    if v is None:
        return None
    if isinstance(v, bool):
        raise AccountError(f"invalid amount {v!r}")
    try:
        amt = v if isinstance(v, Decimal) else Decimal(str(v))
    except InvalidOperation:
        raise AccountError(f"invalid amount {v!r}")
    if not amt.is_finite():
        raise AccountError(f"invalid amount {v!r}")
    return amt


class Balance:
    """
    A trustline balance. Native lumen balances have no code or issuer.
    """

    def __init__(self, assetCode, assetIssuer, balance):
        """
        Args:
            assetCode (str or None): The asset code.
            assetIssuer (str or None): The issuer's public key.
            balance (Decimal, str, int, or float): The amount held. Converted
                with parseAmount.
        """
        self.assetCode = assetCode
        self.assetIssuer = assetIssuer
        self.balance = parseAmount(balance)

    @staticmethod
    def parse(obj):
        if obj.get("asset_type") == NATIVE_ASSET_TYPE:
            code, issuer = None, None
        else:
            code, issuer = obj.get("asset_code"), obj.get("asset_issuer")
        return Balance(
            assetCode=code, assetIssuer=issuer, balance=obj["balance"]
        )

    def isAsset(self, asset):
        """
        Whether this balance is held in asset.

        Args:
            asset (Asset): The asset.
        """
        return asset.matches(self.assetCode, self.assetIssuer)

    def __repr__(self):
        return f"Balance({self.assetCode!r}, {self.assetIssuer!r}, {self.balance})"


class Signer:
    """
    An account signer and its weight.
    """

    def __init__(self, publicKey, weight):
        self.publicKey = publicKey
        self.weight = weight

    @staticmethod
    def parse(obj):
        key = obj["key"] if "key" in obj else obj["public_key"]
        return Signer(publicKey=key, weight=int(obj["weight"]))

    def __repr__(self):
        return f"Signer({self.publicKey!r}, {self.weight})"


class Account:
    """
    Account is a snapshot of the ledger state of one address.
    """

    def __init__(self, accountId, balance=None, balances=None, signers=None):
        """
        Args:
            accountId (str): The account's public key.
            balance (Decimal, str, int, float, or None): The native balance,
                converted with parseAmount. None or zero means the account is
                unfunded.
            balances (list(Balance)): The account's balances, including
                trustlines.
            signers (list(Signer)): The account's signers.
        """
        self.accountId = accountId
        self.balance = parseAmount(balance)
        self.balances = balances if balances is not None else []
        self.signers = signers if signers is not None else []

    @staticmethod
    def unfunded(accountId):
        """
        The snapshot of an address with no account on the ledger.
        """
        return Account(accountId)

    @property
    def funded(self):
        return bool(self.balance)

    def balanceOf(self, asset):
        """
        Find the balance held in asset.

        Args:
            asset (Asset): The asset.

        Returns:
            Balance or None: The first matching balance, if any.
        """
        for b in self.balances:
            if b.isAsset(asset):
                return b
        return None

    @staticmethod
    def parse(obj):
        """
        Parse the account JSON. A top-level "balance" field takes precedence
        over the native entry of "balances" as the account's native balance.

        Args:
            obj (dict): The decoded account JSON.

        Returns:
            Account: The snapshot.

        Raises:
            AccountError: A required field is missing or malformed.
        """
        if not isinstance(obj, dict):
            raise AccountError(f"expected account object, got {type(obj).__name__}")
        try:
            accountId = obj["account_id"] if "account_id" in obj else obj["id"]
            balances = [Balance.parse(b) for b in obj.get("balances", [])]
            signers = [Signer.parse(s) for s in obj.get("signers", [])]
        except (KeyError, TypeError, ValueError, AttributeError) as err:
            raise AccountError(f"malformed account data: {err!r}")

        if "balance" in obj:
            balance = obj["balance"]
        else:
            balance = next(
                (b.balance for b in balances if b.assetCode is None), None,
            )
        return Account(
            accountId=accountId, balance=balance, balances=balances, signers=signers,
        )

    def __repr__(self):
        return (
            f"Account({self.accountId!r}, balance={self.balance}, "
            f"balances={self.balances!r}, signers={self.signers!r})"
        )
