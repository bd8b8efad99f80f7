"""
The burn transaction: the atomic unit that moves the global counters, the
holder's burn ledger and the holder's token balance together.
"""
import logging
from typing import Optional

from burn_boost.errors import InvalidBurnAmount, NotFound, LedgerError, ExternalBurnFailed
from burn_boost.events import BurnCompleted, BoostChanged, NotificationSink, LoggingSink, emit_all
from burn_boost.store import StateStore, token_data_key, user_data_key
from burn_boost.token_ledger import TokenLedger
from burn_boost.token_state import GlobalTokenState
from burn_boost.user_state import UserBurnLedger

logger = logging.getLogger(__name__)


class BurnTransaction:

    def __init__(self, store: StateStore, ledger: TokenLedger,
                 sink: Optional[NotificationSink] = None):
        self.store = store
        self.ledger = ledger
        self.sink = sink or LoggingSink()

    def execute(self, token_id: bytes, holder: bytes, amount: int,
                holder_account: Optional[bytes] = None) -> GlobalTokenState:
        """
        Burn `amount` of `token_id` held by `holder`.

        Either every counter, the holder's ledger entry and the holder's
        balance move together, or nothing is persisted at all.

        Args:
            token_id: Token to burn
            holder: Address of the holder authorizing the burn
            amount: Units to burn (positive)
            holder_account: Source token account; defaults to the holder's own

        Returns:
            The committed GlobalTokenState
        """
        if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
            raise InvalidBurnAmount(amount)

        if holder_account is None:
            holder_account = self.ledger.associated_account(token_id, holder)

        state_key = token_data_key(token_id)
        ledger_key = user_data_key(token_id, holder)

        with self.store.transaction(state_key) as txn:
            raw = txn.get(state_key)
            if raw is None:
                raise NotFound(token_id)
            token_state = GlobalTokenState(raw)

            raw_ledger = txn.get(ledger_key)
            if raw_ledger is None:
                user_ledger = UserBurnLedger.empty(holder, token_id)
            else:
                user_ledger = UserBurnLedger(raw_ledger)

            old_multiplier = token_state.apply_burn(amount)
            user_ledger.record_burn(amount)

            try:
                self.ledger.burn_from(txn, token_id, holder_account, holder, amount)
            except LedgerError as e:
                logger.warning(f"Burn of {amount} by {holder.hex()[:8]} rejected by ledger: {e}")
                raise ExternalBurnFailed(e) from e

            token_state.validate()
            txn.set(state_key, token_state.to_dict())
            txn.set(ledger_key, user_ledger.to_dict())
            # Delivered in commit order while the token is still locked
            txn.on_commit(lambda: self._notify(token_id, holder, amount, old_multiplier, token_state))

        return token_state

    def _notify(self, token_id: bytes, holder: bytes, amount: int,
                old_multiplier: int, token_state: GlobalTokenState):
        logger.info(
            f"Burned {amount} of {token_state.symbol} by {holder.hex()[:8]}: "
            f"total {token_state.total_burned}, multiplier {token_state.current_boost_multiplier}bp"
        )

        events = [BurnCompleted(
            token_id=token_id,
            holder=holder,
            amount=amount,
            new_multiplier=token_state.current_boost_multiplier,
            total_burned=token_state.total_burned,
        )]
        if old_multiplier != token_state.current_boost_multiplier:
            events.append(BoostChanged(
                token_id=token_id,
                old_multiplier=old_multiplier,
                new_multiplier=token_state.current_boost_multiplier,
                burned_percentage=token_state.burned_percentage,
            ))
        emit_all(self.sink, events)
