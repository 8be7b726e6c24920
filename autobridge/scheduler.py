import asyncio
import random
from datetime import datetime, timezone
from enum import Enum
from typing import Awaitable, Callable, Optional

from config import COUNTDOWN_TICK_SECONDS
from autobridge.day_window import DayWindow
from autobridge.errors import ConfigurationError, FatalRuntimeError
from autobridge.models import AttemptOutcome
from autobridge.progress import ConsoleProgress, utc_stamp


class SchedulerState(Enum):
    RUNNING = "running"
    QUOTA_REACHED = "quota_reached"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class QuotaScheduler:
    """
    Денна квота депозитів з випадковою ціллю на день і випадковою паузою між
    спробами. Невдалі спроби не зараховуються і не зупиняють цикл.
    """

    def __init__(self, executor, min_per_day: int, max_per_day: int,
                 min_delay_seconds: int, max_delay_seconds: int, offset_minutes: int,
                 progress=None, rng: Optional[random.Random] = None,
                 clock: Optional[Callable[[], datetime]] = None,
                 sleep: Optional[Callable[[float], Awaitable]] = None,
                 countdown_tick: float = COUNTDOWN_TICK_SECONDS):
        if not 1 <= min_per_day <= max_per_day:
            raise ConfigurationError(f"Невірний діапазон транзакцій на день: {min_per_day}..{max_per_day}")
        if not 0 <= min_delay_seconds <= max_delay_seconds:
            raise ConfigurationError(f"Невірний діапазон затримки: {min_delay_seconds}..{max_delay_seconds}")
        if countdown_tick <= 0:
            raise ConfigurationError("Крок зворотного відліку має бути більше нуля")

        self.executor = executor
        self.min_delay_seconds = min_delay_seconds
        self.max_delay_seconds = max_delay_seconds
        self.progress = progress or ConsoleProgress()
        self.rng = rng or random.Random()
        self.clock = clock or utc_now
        self.countdown_tick = countdown_tick
        self._sleep = sleep or self._interruptible_sleep
        self._stop = asyncio.Event()

        self.state = SchedulerState.RUNNING
        self.attempts = 0
        self.failures = 0
        self.last_outcome: Optional[AttemptOutcome] = None
        try:
            self.window = DayWindow(min_per_day, max_per_day, offset_minutes, self.clock(), self.rng)
        except (ValueError, OverflowError) as e:
            raise ConfigurationError(f"Не вдалося визначити межу дня для зсуву {offset_minutes} хв: {e}") from e

    @classmethod
    def from_settings(cls, settings, executor, **kwargs) -> "QuotaScheduler":
        return cls(
            executor,
            min_per_day=settings.min_per_day,
            max_per_day=settings.max_per_day,
            min_delay_seconds=settings.min_delay_seconds,
            max_delay_seconds=settings.max_delay_seconds,
            offset_minutes=settings.boundary_offset_minutes,
            **kwargs,
        )

    @property
    def stopped(self) -> bool:
        return self._stop.is_set()

    def stop(self):
        self._stop.set()

    async def _interruptible_sleep(self, seconds: float):
        try:
            await asyncio.wait_for(self._stop.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            pass

    def draw_delay(self) -> int:
        return self.rng.randint(self.min_delay_seconds, self.max_delay_seconds)

    async def run(self):
        self.progress.start(self.window.target_count, self.window.completed_count)
        while not self.stopped:
            self._roll_over(self.clock())

            if self.window.quota_reached:
                await self._wait_for_next_day()
                continue

            await self._fire_once()
            if self.stopped:
                break

            delay = self.draw_delay()
            print(f"⏳ Наступний депозит через ~{delay}с (залишилось на сьогодні: {self.window.remaining})")
            await self._sleep(delay)

        print("🛑 Зупинка планувальника")

    def _roll_over(self, now: datetime) -> bool:
        if not self.window.roll_over(now):
            return False
        self.state = SchedulerState.RUNNING
        print("\n=== Новий день! Скидаю лічильники. ===\n")
        print(f"[{utc_stamp()}] Нова ціль на день: {self.window.target_count} tx")
        self.progress.start(self.window.target_count, self.window.completed_count)
        return True

    async def _wait_for_next_day(self):
        self.state = SchedulerState.QUOTA_REACHED
        print(f"\n=== Денну квоту виконано ({self.window.completed_count}/{self.window.target_count}). "
              f"Чекаємо на новий день... ===")

        while not self.stopped:
            now = self.clock()
            if self.window.is_over(now):
                break
            remaining = self.window.time_left(now)
            self.progress.countdown(remaining)
            await self._sleep(min(remaining.total_seconds(), self.countdown_tick))
        self.progress.countdown_done()

        if not self.stopped:
            self._roll_over(self.clock())

    async def _fire_once(self) -> AttemptOutcome:
        self.attempts += 1
        try:
            outcome = await self.executor.attempt()
        except Exception as e:
            raise FatalRuntimeError(f"Непередбачувана помилка під час спроби #{self.attempts}: {e}") from e

        self.last_outcome = outcome
        if outcome.confirmed:
            self.window.record_success()
            self.progress.update(self.window.completed_count)
        else:
            self.failures += 1
            print(f"[{utc_stamp()}] ❌ Спроба #{self.attempts} не вдалась ({outcome.kind.value}): {outcome.error}")
            print("⏳ Не зараховано в денну квоту, продовжуємо після звичайної затримки...\n")
        return outcome
