"""
Burn notifications and the sinks that receive them.

Emission is fire-and-forget: it happens after a burn has committed and a
failing sink never affects the burn itself.
"""
import logging
import threading
import time
from dataclasses import dataclass, field, asdict

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BurnCompleted:
    token_id: bytes
    holder: bytes
    amount: int
    new_multiplier: int
    total_burned: int
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class BoostChanged:
    token_id: bytes
    old_multiplier: int
    new_multiplier: int
    burned_percentage: int
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> dict:
        return asdict(self)


class NotificationSink:
    """Receives events. Subclasses override emit()."""

    def emit(self, event):
        raise NotImplementedError


class LoggingSink(NotificationSink):

    def emit(self, event):
        if isinstance(event, BurnCompleted):
            logger.info(
                f"TokensBurned: holder={event.holder.hex()[:8]} amount={event.amount} "
                f"multiplier={event.new_multiplier}bp"
            )
        elif isinstance(event, BoostChanged):
            logger.info(
                f"MarketCapBoosted: {event.old_multiplier}bp -> {event.new_multiplier}bp "
                f"at {event.burned_percentage}bp burned"
            )
        else:
            logger.info(f"Event: {event}")


class EventLog(NotificationSink):
    """In-memory event history, newest last."""

    def __init__(self, max_events: int = 10_000):
        self.max_events = max_events
        self.events = []
        self._lock = threading.Lock()

    def emit(self, event):
        with self._lock:
            self.events.append(event)
            if len(self.events) > self.max_events:
                self.events = self.events[-self.max_events:]

    def burns(self, token_id: bytes = None) -> list[BurnCompleted]:
        with self._lock:
            return [
                e for e in self.events
                if isinstance(e, BurnCompleted) and (token_id is None or e.token_id == token_id)
            ]

    def boosts(self, token_id: bytes = None) -> list[BoostChanged]:
        with self._lock:
            return [
                e for e in self.events
                if isinstance(e, BoostChanged) and (token_id is None or e.token_id == token_id)
            ]

    def burn_history(self, token_id: bytes) -> list[dict]:
        """
        Burns of one token with the running total after each.

        Returns:
            List of {'timestamp', 'holder', 'amount', 'cumulative_burned', 'multiplier'}
        """
        return [
            {
                'timestamp': e.timestamp,
                'holder': e.holder,
                'amount': e.amount,
                'cumulative_burned': e.total_burned,
                'multiplier': e.new_multiplier,
            }
            for e in self.burns(token_id)
        ]


class FanoutSink(NotificationSink):
    """Forwards every event to each child sink."""

    def __init__(self, *sinks: NotificationSink):
        self.sinks = list(sinks)

    def emit(self, event):
        for sink in self.sinks:
            sink.emit(event)


def emit_all(sink: NotificationSink, events: list):
    """Deliver events best-effort; sink failures are logged, never raised."""
    for event in events:
        try:
            sink.emit(event)
        except Exception as e:
            logger.warning(f"Failed to emit {type(event).__name__}: {e}")
