import logging

from algosdk.encoding import is_valid_address

logger = logging.getLogger(__name__)


class Asset:
    """
    In-memory fungible asset with balances and allowances.

    Transfers report failure by returning False; the ledger treats a falsy
    return the same as a raised AssetError.
    """

    def __init__(self, asset_id, name="", unit_name="", decimals=0):
        self.asset_id = asset_id
        self.name = name
        self.unit_name = unit_name
        self.decimals = decimals
        self.balances = {}
        self.allowances = {}

    def __repr__(self):
        return f"Asset(asset_id={self.asset_id}, unit_name={self.unit_name!r})"

    def balance_of(self, address):
        return self.balances.get(address, 0)

    def allowance(self, owner, spender):
        return self.allowances.get((owner, spender), 0)

    def set_balance(self, address, amount):
        self.balances[address] = amount

    def mint(self, address, amount):
        self.balances[address] = self.balance_of(address) + amount

    def approve(self, owner, spender, amount):
        self.allowances[(owner, spender)] = amount
        return True

    def transfer(self, sender, receiver, amount):
        if not is_valid_address(receiver) or amount < 0:
            return False
        if self.balance_of(sender) < amount:
            logger.debug(f"Asset {self.asset_id}: {sender} has insufficient balance for {amount}")
            return False

        self.balances[sender] = self.balance_of(sender) - amount
        self.balances[receiver] = self.balance_of(receiver) + amount
        return True

    def transfer_from(self, spender, owner, receiver, amount):
        allowance = self.allowance(owner, spender)
        if allowance < amount:
            logger.debug(f"Asset {self.asset_id}: {spender} allowance from {owner} is below {amount}")
            return False
        if not self.transfer(owner, receiver, amount):
            return False

        self.allowances[(owner, spender)] = allowance - amount
        return True
