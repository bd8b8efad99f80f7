"""
Read-only projections over committed token state.
"""
from dataclasses import dataclass, asdict

from burn_boost import boost
from burn_boost.boost import BoostPreview
from burn_boost.errors import NotFound, InvalidBurnAmount
from burn_boost.store import StateStore, token_data_key, user_data_key, user_data_prefix
from burn_boost.token_state import GlobalTokenState
from burn_boost.user_state import UserBurnLedger

DEFAULT_PROJECTION_PERCENTAGES = (10, 25, 50)


@dataclass(frozen=True)
class TokenStats:
    initial_supply: int
    current_supply: int
    total_burned: int
    burned_percentage: int
    current_market_cap: int
    boost_percentage: int
    burn_transaction_count: int

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class BurnProjection:
    """What burning `percentage`% of the current supply would do."""
    percentage: int
    additional_burn: int
    preview: BoostPreview
    projected_market_cap: int

    def to_dict(self) -> dict:
        data = asdict(self)
        data['preview'] = self.preview.to_dict()
        return data


class StatsQuery:

    def __init__(self, store: StateStore):
        self.store = store

    def get_token_state(self, token_id: bytes) -> GlobalTokenState:
        raw = self.store.read(token_data_key(token_id))
        if raw is None:
            raise NotFound(token_id)
        return GlobalTokenState(raw)

    def get_stats(self, token_id: bytes) -> TokenStats:
        state = self.get_token_state(token_id)
        return TokenStats(
            initial_supply=state.initial_supply,
            current_supply=state.current_supply,
            total_burned=state.total_burned,
            burned_percentage=state.burned_percentage,
            current_market_cap=state.current_market_cap,
            boost_percentage=state.boost_percentage,
            burn_transaction_count=state.burn_transaction_count,
        )

    def remaining_supply_percentage(self, token_id: bytes) -> int:
        state = self.get_token_state(token_id)
        return boost.remaining_supply_percentage(state.current_supply, state.initial_supply)

    def get_user_burned(self, token_id: bytes, holder: bytes) -> int:
        """Cumulative amount `holder` has burned; 0 if they never burned."""
        raw = self.store.read(user_data_key(token_id, holder))
        if raw is None:
            return 0
        return UserBurnLedger(raw).burned_amount

    def top_burners(self, token_id: bytes, limit: int = 10) -> list[UserBurnLedger]:
        ledgers = [UserBurnLedger(raw) for _, raw in self.store.read_prefix(user_data_prefix(token_id))]
        ledgers.sort(key=lambda entry: entry.burned_amount, reverse=True)
        return ledgers[:limit]


class PreviewCalculator:

    def __init__(self, stats: StatsQuery):
        self.stats = stats

    def preview_boost(self, token_id: bytes, hypothetical_amount: int) -> BoostPreview:
        """
        Boost that burning `hypothetical_amount` right now would produce.
        Nothing is written.
        """
        if isinstance(hypothetical_amount, bool) or not isinstance(hypothetical_amount, int) \
                or hypothetical_amount < 0:
            raise InvalidBurnAmount(hypothetical_amount)
        state = self.stats.get_token_state(token_id)
        return boost.preview(state.total_burned, state.initial_supply, hypothetical_amount)

    def project_burn_impact(self, token_id: bytes,
                            percentages=DEFAULT_PROJECTION_PERCENTAGES) -> list[BurnProjection]:
        """Previews for burning each given percentage of the current supply."""
        state = self.stats.get_token_state(token_id)
        projections = []
        for percentage in percentages:
            additional = state.current_supply * percentage // 100
            result = boost.preview(state.total_burned, state.initial_supply, additional)
            projections.append(BurnProjection(
                percentage=percentage,
                additional_burn=additional,
                preview=result,
                projected_market_cap=boost.current_market_cap(state.base_market_cap, result.multiplier_bp),
            ))
        return projections
