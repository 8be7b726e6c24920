import sys
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from web3 import Web3

BAR_WIDTH = 40


def utc_stamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def format_eth(wei: int) -> str:
    return f"{Decimal(Web3.from_wei(wei, 'ether')).normalize():f} ETH"


def format_gwei(wei: int) -> str:
    return f"{(Decimal(wei) / Decimal(10 ** 9)).normalize():f} gwei"


def hhmmss(remaining: timedelta) -> str:
    total = max(int(remaining.total_seconds()), 0)
    hours, rest = divmod(total, 3600)
    minutes, seconds = divmod(rest, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


def render_bar(target: int, completed: int, width: int = BAR_WIDTH) -> str:
    ratio = min(completed / target, 1) if target > 0 else 1
    filled = int(round(ratio * width))
    return f"[{'█' * filled}{'░' * (width - filled)}] {int(ratio * 100):3d}% | {completed}/{target}"


class ConsoleProgress:
    """Прогрес за день у консолі. На роботу планувальника не впливає."""

    def __init__(self, stream=None):
        self.stream = stream or sys.stdout
        self.target = 0
        self.completed = 0

    def _write(self, text: str):
        self.stream.write(text)
        self.stream.flush()

    def start(self, target: int, completed: int = 0):
        self.target = target
        self.completed = completed
        self._write(f"📊 {render_bar(target, completed)}\n")

    def update(self, completed: int):
        self.completed = completed
        self._write(f"📊 {render_bar(self.target, completed)}\n")

    def countdown(self, remaining: timedelta):
        self._write(f"\r⏳ До нового дня: {hhmmss(remaining)}   ")

    def countdown_done(self):
        self._write("\n")
