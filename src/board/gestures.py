"""
Press / hold gesture interpretation for one interactive zone.

Each zone (e.g. "minus life of player X") owns its own GestureTimer instance. The caller holds on to that instance
and routes the zone's pointer events to it; there is no shared registry of timers keyed by zone name.

    idle --press_start--> pressed --hold delay elapses--> fired   (emits one burst: BURST_FACTOR * step)
    pressed --press_end / pointer_leave--> idle                   (emits one tap: step)
    fired --press_end / pointer_leave--> idle                     (emits nothing, the burst already happened)
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, Optional, Protocol

from src.board.intents import AdjustLife, Intent
from src.core.models import PlayerId
from src.core.shared_types import ZoneState

logger = logging.getLogger(__name__)

HOLD_DELAY_SECONDS = 0.5
BURST_FACTOR = 10


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """The two things a zone needs from a clock: reading it and scheduling a callback on it."""

    def now(self) -> float: ...
    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle: ...


class EventLoopScheduler:
    """Scheduler backed by an asyncio event loop (the running one unless given explicitly)."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        return self._loop or asyncio.get_running_loop()

    def now(self) -> float:
        return self.loop.time()

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        return self.loop.call_later(delay, callback)


class GestureTimer:
    """State machine for a single zone. Emits adjustments (multiples of `step`) through `on_adjust`."""

    def __init__(
        self,
        step: int,
        on_adjust: Callable[[int], None],
        scheduler: Scheduler,
        hold_delay: float = HOLD_DELAY_SECONDS,
        name: str = "zone",
    ) -> None:
        self.step = step
        self.name = name
        self._on_adjust = on_adjust
        self._scheduler = scheduler
        self._hold_delay = hold_delay
        self._state = ZoneState.IDLE
        self._pressed_at: Optional[float] = None
        self._timer: Optional[TimerHandle] = None

    @property
    def state(self) -> ZoneState:
        return self._state

    def on_press_start(self) -> None:
        if self._state != ZoneState.IDLE:
            # e.g. touchstart followed by a synthesized mousedown: keep the one timer that is already running
            logger.debug("%s: press start ignored in state %s", self.name, self._state)
            return
        self._state = ZoneState.PRESSED
        self._pressed_at = self._scheduler.now()
        self._timer = self._scheduler.call_later(self._hold_delay, self._on_hold)
        logger.debug("%s: pressed", self.name)

    def on_press_end(self) -> None:
        if self._state == ZoneState.IDLE:
            return

        fired = self._state == ZoneState.FIRED
        self._reset()
        if fired:
            logger.debug("%s: released after burst", self.name)
            return

        # Released before the timer fired. Even if the clock says the threshold has passed
        # (suspended tab, skewed clock), the burst never happened, so this is a tap.
        logger.debug("%s: tap", self.name)
        self._on_adjust(self.step)

    def on_pointer_leave(self) -> None:
        self.on_press_end()

    def dispose(self) -> None:
        """Zone is going away: drop pending state without emitting anything."""
        self._reset()

    @property
    def elapsed(self) -> Optional[float]:
        if self._pressed_at is None:
            return None
        return self._scheduler.now() - self._pressed_at

    # -- Internal helpers --
    def _on_hold(self) -> None:
        if self._state != ZoneState.PRESSED:
            return
        self._timer = None
        self._state = ZoneState.FIRED
        logger.debug("%s: burst", self.name)
        self._on_adjust(self.step * BURST_FACTOR)

    def _reset(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._pressed_at = None
        self._state = ZoneState.IDLE


@dataclass
class LifeZones:
    """The two halves of a player tile: left decrements, right increments."""

    minus: GestureTimer
    plus: GestureTimer

    def dispose(self) -> None:
        self.minus.dispose()
        self.plus.dispose()


def life_zones(
    player_id: PlayerId,
    submit: Callable[[Intent], object],
    scheduler: Scheduler,
    step: int = 1,
) -> LifeZones:
    """Build the zone pair for a player tile. Every emitted adjustment is submitted as an AdjustLife intent."""

    def _emitter(sign: int) -> Callable[[int], None]:
        def _emit(amount: int) -> None:
            submit(AdjustLife(player_id=player_id, delta=sign * amount))

        return _emit

    return LifeZones(
        minus=GestureTimer(step, _emitter(-1), scheduler, name=f"{player_id}:minus"),
        plus=GestureTimer(step, _emitter(+1), scheduler, name=f"{player_id}:plus"),
    )
