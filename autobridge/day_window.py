import random
from datetime import datetime, time, timedelta, timezone


def next_boundary(now: datetime, offset_minutes: int) -> datetime:
    """
    Наступна локальна північ для зсуву offset_minutes від UTC, повертається в UTC.
    """
    if now.tzinfo is None:
        raise ValueError("now має містити часову зону")
    local_tz = timezone(timedelta(minutes=offset_minutes))
    local_now = now.astimezone(local_tz)
    midnight = datetime.combine(local_now.date() + timedelta(days=1), time(0), tzinfo=local_tz)
    return midnight.astimezone(timezone.utc)


def time_until_next_boundary(now: datetime, offset_minutes: int) -> timedelta:
    return next_boundary(now, offset_minutes) - now


def draw_target(min_per_day: int, max_per_day: int, rng: random.Random) -> int:
    return rng.randint(min_per_day, max_per_day)


class DayWindow:
    def __init__(self, min_per_day: int, max_per_day: int, offset_minutes: int,
                 now: datetime, rng: random.Random):
        self.min_per_day = min_per_day
        self.max_per_day = max_per_day
        self.offset_minutes = offset_minutes
        self._rng = rng
        self.target_count = 0
        self.completed_count = 0
        self.ends_at = now
        self._open(now)

    def _open(self, now: datetime):
        self.target_count = draw_target(self.min_per_day, self.max_per_day, self._rng)
        self.completed_count = 0
        self.ends_at = next_boundary(now, self.offset_minutes)

    @property
    def remaining(self) -> int:
        return max(self.target_count - self.completed_count, 0)

    @property
    def quota_reached(self) -> bool:
        return self.completed_count >= self.target_count

    def is_over(self, now: datetime) -> bool:
        return now >= self.ends_at

    def time_left(self, now: datetime) -> timedelta:
        return self.ends_at - now

    def record_success(self):
        self.completed_count += 1

    def roll_over(self, now: datetime) -> bool:
        # Лише один перехід на кожну північ, скільки б разів нас не будили
        if not self.is_over(now):
            return False
        self._open(now)
        return True
