"""
Token ledger service: mint records and holder token accounts.

Every operation takes the enclosing StateTransaction so that balance
changes commit or roll back together with the burn/boost records.
"""
import logging

from burn_boost import boost
from burn_boost.errors import (
    InsufficientBalance, Unauthorized, AccountNotFound, MintSupplyMismatch,
)
from burn_boost.store import StateTransaction, mint_key, account_key

logger = logging.getLogger(__name__)


class TokenLedger:

    def create_mint(self, state: StateTransaction, token_id: bytes,
                    mint_authority: bytes, decimals: int):
        """Register a new mint with zero supply."""
        state.create(mint_key(token_id), {
            'mint_authority': mint_authority,
            'decimals': decimals,
            'supply': 0,
        })

    def get_mint(self, state: StateTransaction, token_id: bytes) -> dict:
        mint = state.get(mint_key(token_id))
        if mint is None:
            raise AccountNotFound(f"No mint for token {token_id.hex()}")
        return mint

    def associated_account(self, token_id: bytes, owner: bytes) -> bytes:
        """Storage key of the token account `owner` holds for `token_id`."""
        return account_key(token_id, owner)

    def _get_account(self, state: StateTransaction, key: bytes, owner: bytes) -> dict:
        account = state.get(key)
        if account is None:
            return {'owner': owner, 'amount': 0}
        return account

    def balance_of(self, state: StateTransaction, token_id: bytes, owner: bytes) -> int:
        key = self.associated_account(token_id, owner)
        return int(self._get_account(state, key, owner)['amount'])

    def mint_to(self, state: StateTransaction, token_id: bytes, destination: bytes,
                amount: int, authority: bytes):
        """Create `amount` new units in the destination owner's account."""
        mint = self.get_mint(state, token_id)
        if bytes(mint['mint_authority']) != authority:
            raise Unauthorized(f"{authority.hex()} is not the mint authority")

        mint['supply'] = boost.checked_add(mint['supply'], amount, "mint supply")

        key = self.associated_account(token_id, destination)
        account = self._get_account(state, key, destination)
        account['amount'] = boost.checked_add(account['amount'], amount, "account balance")

        state.set(mint_key(token_id), mint)
        state.set(key, account)
        logger.debug(f"Minted {amount} of {token_id.hex()[:8]} to {destination.hex()[:8]}")

    def burn_from(self, state: StateTransaction, token_id: bytes, holder_account: bytes,
                  owner: bytes, amount: int):
        """
        Destroy `amount` units from `holder_account`, authorized by `owner`.

        Raises Unauthorized if `owner` does not own the account and
        InsufficientBalance if the account holds less than `amount`.
        """
        account = state.get(holder_account)
        if account is None:
            raise InsufficientBalance(requested=amount, balance=0)
        if bytes(account['owner']) != owner:
            raise Unauthorized(f"{owner.hex()} does not own the source account")
        if account['amount'] < amount:
            raise InsufficientBalance(requested=amount, balance=account['amount'])

        mint = self.get_mint(state, token_id)
        if mint['supply'] < amount:
            raise MintSupplyMismatch(f"Mint supply {mint['supply']} is below burn amount {amount}")

        account['amount'] -= amount
        mint['supply'] -= amount
        state.set(holder_account, account)
        state.set(mint_key(token_id), mint)
        logger.debug(f"Burned {amount} of {token_id.hex()[:8]} from {owner.hex()[:8]}")

    def transfer(self, state: StateTransaction, token_id: bytes, source_owner: bytes,
                 destination_owner: bytes, amount: int):
        self.get_mint(state, token_id)

        source_key = self.associated_account(token_id, source_owner)
        source = self._get_account(state, source_key, source_owner)
        if source['amount'] < amount:
            raise InsufficientBalance(requested=amount, balance=source['amount'])

        if source_owner == destination_owner:
            return

        destination_key = self.associated_account(token_id, destination_owner)
        destination = self._get_account(state, destination_key, destination_owner)

        source['amount'] -= amount
        destination['amount'] = boost.checked_add(destination['amount'], amount, "account balance")
        state.set(source_key, source)
        state.set(destination_key, destination)
