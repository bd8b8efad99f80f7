"""
The burn/boost program: public operation surface over the token records.

Operations:
- initialize: create a token record and mint its initial supply
- burn: destroy holder tokens and raise the market-cap boost
- transfer: move tokens between holders
- get_stats / preview_boost: read-only views
- submit: run a signed Instruction on behalf of its signer
"""
import logging
import time
from typing import Optional

from burn_boost import boost
from burn_boost.boost import BoostPreview
from burn_boost.burn_transaction import BurnTransaction
from burn_boost.core import Instruction, INITIALIZE, BURN, TRANSFER
from burn_boost.db import DB
from burn_boost.errors import (
    BurnBoostError, FieldTooLong, InvalidTokenParameters, InvalidInstruction,
    AlreadyInitialized, AuthorizationError, InvalidNonce, LedgerError,
    ExternalMintFailed, NotFound, ValidationError,
)
from burn_boost.events import NotificationSink, LoggingSink
from burn_boost.monitoring import Monitor
from burn_boost.stats import StatsQuery, PreviewCalculator, TokenStats, DEFAULT_PROJECTION_PERCENTAGES
from burn_boost.store import StateStore, AlreadyExists, token_data_key, nonce_key
from burn_boost.token_ledger import TokenLedger
from burn_boost.token_state import GlobalTokenState, MAX_NAME_LENGTH, MAX_SYMBOL_LENGTH
from burn_boost.user_state import UserBurnLedger

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def _is_u64(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and 0 <= value <= boost.U64_MAX


class BurnBoostProgram:
    def __init__(self, db_path: str = None, db: DB = None,
                 ledger: TokenLedger = None, sink: NotificationSink = None,
                 monitor: Monitor = None):
        if db:
            self.db = db
        elif db_path:
            self.db = DB(db_path)
        else:
            raise ValueError("Either db_path or a DB object must be provided.")

        self.store = StateStore(self.db)
        self.ledger = ledger or TokenLedger()
        self.sink = sink or LoggingSink()
        self.monitor = monitor or Monitor()

        self.stats = StatsQuery(self.store)
        self.previews = PreviewCalculator(self.stats)
        self.burns = BurnTransaction(self.store, self.ledger, self.sink)

    def close(self):
        self.monitor.stop_server()
        self.db.close()

    # ==========================================================================
    # INITIALIZE
    # ==========================================================================

    def initialize(self, authority: bytes, token_id: bytes, name: str, symbol: str,
                   decimals: int, initial_supply: int, base_market_cap: int) -> GlobalTokenState:
        """
        Create the token record and mint the initial supply to the authority.

        The record and the mint commit together; if minting fails no record
        is left behind.
        """
        if not isinstance(name, str) or not isinstance(symbol, str):
            raise InvalidTokenParameters("name and symbol must be strings")
        if len(name) > MAX_NAME_LENGTH:
            raise FieldTooLong("name", len(name), MAX_NAME_LENGTH)
        if len(symbol) > MAX_SYMBOL_LENGTH:
            raise FieldTooLong("symbol", len(symbol), MAX_SYMBOL_LENGTH)
        if not _is_u64(initial_supply) or initial_supply == 0:
            raise InvalidTokenParameters(f"initial_supply must be a positive u64, got {initial_supply!r}")
        if not _is_u64(base_market_cap):
            raise InvalidTokenParameters(f"base_market_cap must be a u64, got {base_market_cap!r}")
        if isinstance(decimals, bool) or not isinstance(decimals, int) or not 0 <= decimals <= 255:
            raise InvalidTokenParameters(f"decimals must fit in a u8, got {decimals!r}")

        state_key = token_data_key(token_id)
        token_state = GlobalTokenState.new(
            authority=authority,
            mint=token_id,
            name=name,
            symbol=symbol,
            decimals=decimals,
            initial_supply=initial_supply,
            base_market_cap=base_market_cap,
        )

        try:
            with self.store.transaction(state_key) as txn:
                try:
                    txn.create(state_key, token_state.to_dict())
                except AlreadyExists:
                    raise AlreadyInitialized(token_id) from None

                try:
                    self.ledger.create_mint(txn, token_id, authority, decimals)
                    self.ledger.mint_to(txn, token_id, authority, initial_supply, authority=authority)
                except (LedgerError, AlreadyExists) as e:
                    raise ExternalMintFailed(e) from e
        except BurnBoostError:
            self.monitor.record_operation("initialize", "failed")
            raise

        self.monitor.record_operation("initialize", "success")
        self.monitor.update_token(token_state)
        logger.info(
            f"Initialized {symbol} ({token_id.hex()[:8]}): supply {initial_supply}, "
            f"base market cap {base_market_cap}"
        )
        return token_state

    # ==========================================================================
    # BURN & TRANSFER
    # ==========================================================================

    def burn(self, holder: bytes, token_id: bytes, amount: int,
             holder_account: Optional[bytes] = None) -> GlobalTokenState:
        start = time.time()
        try:
            token_state = self.burns.execute(token_id, holder, amount, holder_account=holder_account)
        except BurnBoostError as e:
            self.monitor.record_operation("burn", "failed")
            logger.warning(f"Burn rejected: {e}")
            raise
        self.monitor.record_burn(token_state, amount, time.time() - start)
        return token_state

    def transfer(self, source: bytes, destination: bytes, token_id: bytes, amount: int):
        if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
            raise ValidationError(f"Transfer amount must be a positive integer, got {amount!r}")

        state_key = token_data_key(token_id)
        try:
            with self.store.transaction(state_key) as txn:
                if not txn.exists(state_key):
                    raise NotFound(token_id)
                self.ledger.transfer(txn, token_id, source, destination, amount)
        except BurnBoostError:
            self.monitor.record_operation("transfer", "failed")
            raise
        self.monitor.record_operation("transfer", "success")

    # ==========================================================================
    # READ-ONLY VIEWS
    # ==========================================================================

    def get_token_state(self, token_id: bytes) -> GlobalTokenState:
        return self.stats.get_token_state(token_id)

    def get_stats(self, token_id: bytes) -> TokenStats:
        return self.stats.get_stats(token_id)

    def preview_boost(self, token_id: bytes, hypothetical_amount: int) -> BoostPreview:
        return self.previews.preview_boost(token_id, hypothetical_amount)

    def project_burn_impact(self, token_id: bytes, percentages=DEFAULT_PROJECTION_PERCENTAGES):
        return self.previews.project_burn_impact(token_id, percentages)

    def get_user_burned(self, token_id: bytes, holder: bytes) -> int:
        return self.stats.get_user_burned(token_id, holder)

    def get_remaining_supply_percentage(self, token_id: bytes) -> int:
        return self.stats.remaining_supply_percentage(token_id)

    def top_burners(self, token_id: bytes, limit: int = 10) -> list[UserBurnLedger]:
        return self.stats.top_burners(token_id, limit)

    def balance_of(self, token_id: bytes, owner: bytes) -> int:
        account = self.store.read(self.ledger.associated_account(token_id, owner))
        return int(account['amount']) if account else 0

    # ==========================================================================
    # SIGNED INSTRUCTIONS
    # ==========================================================================

    def get_nonce(self, address: bytes) -> int:
        record = self.store.read(nonce_key(address))
        return record['nonce'] if record else 0

    def _consume_nonce(self, address: bytes, nonce: int):
        """Check and advance the signer nonce. It stays advanced even if the operation fails."""
        key = nonce_key(address)
        with self.store.transaction(key) as txn:
            record = txn.get(key)
            expected = record['nonce'] if record else 0
            if nonce != expected:
                raise InvalidNonce(expected, nonce)
            txn.set(key, {'nonce': expected + 1})

    def submit(self, ix: Instruction):
        """
        Authorize and run a signed instruction.

        The signer's address becomes the authority (INITIALIZE), the holder
        (BURN) or the source (TRANSFER).
        """
        valid, error = ix.validate_basic()
        if not valid:
            raise InvalidInstruction(error)

        if not ix.verify_signature():
            self.monitor.record_operation(ix.ix_type.lower(), "unauthorized")
            raise AuthorizationError("Invalid instruction signature")

        signer = ix.sender_address
        self._consume_nonce(signer, ix.nonce)
        logger.debug(f"Instruction {ix.id.hex()[:8]} ({ix.ix_type}) from {signer.hex()[:8]}")

        data = ix.data
        token_id = data['token_id']
        if ix.ix_type == INITIALIZE:
            return self.initialize(
                authority=signer,
                token_id=token_id,
                name=data['name'],
                symbol=data['symbol'],
                decimals=data['decimals'],
                initial_supply=data['initial_supply'],
                base_market_cap=data['base_market_cap'],
            )
        elif ix.ix_type == BURN:
            return self.burn(signer, token_id, data['amount'])
        elif ix.ix_type == TRANSFER:
            return self.transfer(signer, data['to'], token_id, data['amount'])

        raise InvalidInstruction(f"Unknown instruction type: {ix.ix_type}")
