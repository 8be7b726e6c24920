import json
import os
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from dotenv import load_dotenv
from eth_account import Account
from web3 import Web3

from config import CONFIG_PATH, CONFIRMATION_TIMEOUT_SEC, ENV_FILE, PRIVATE_KEY_ENV
from autobridge.errors import ConfigurationError

MINUTES_PER_DAY = 24 * 60

REQUIRED_KEYS = (
    "RPC_URL",
    "MIN_TX_PER_DAY",
    "MAX_TX_PER_DAY",
    "MIN_AMOUNT_ETH",
    "MAX_AMOUNT_ETH",
    "MIN_DELAY_SEC",
    "MAX_DELAY_SEC",
    "PRIORITY_FEE_GWEI",
    "TIMEZONE_OFFSET_MIN",
    "PROXY_ADDRESS",
)


@dataclass(frozen=True)
class Settings:
    rpc_url: str
    min_per_day: int
    max_per_day: int
    min_amount_eth: Decimal
    max_amount_eth: Decimal
    min_delay_seconds: int
    max_delay_seconds: int
    priority_fee_gwei: Decimal
    boundary_offset_minutes: int
    destination: str
    chain_id: Optional[int] = None
    confirmation_timeout: float = CONFIRMATION_TIMEOUT_SEC
    http_proxy: Optional[str] = None


def _as_int(raw: dict, key: str) -> int:
    value = raw[key]
    # bool теж int, але в конфігу це майже завжди помилка
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(f"{key} має бути цілим числом, отримано {value!r}")
    return value


def _as_decimal(raw: dict, key: str) -> Decimal:
    value = raw[key]
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise ConfigurationError(f"{key} має бути числом, отримано {value!r}")
    try:
        number = Decimal(str(value))
    except ArithmeticError:
        raise ConfigurationError(f"{key} має бути числом, отримано {value!r}") from None
    if not number.is_finite() or number < 0:
        raise ConfigurationError(f"{key} має бути невід'ємним числом, отримано {value!r}")
    return number


def _check_range(low_key: str, low, high_key: str, high):
    if low > high:
        raise ConfigurationError(f"{low_key} ({low}) більше за {high_key} ({high})")


def parse_settings(raw: dict) -> Settings:
    if not isinstance(raw, dict):
        raise ConfigurationError("Конфіг має бути JSON об'єктом")

    missing = [key for key in REQUIRED_KEYS if key not in raw]
    if missing:
        raise ConfigurationError(f"У конфігу бракує ключів: {', '.join(missing)}")

    rpc_url = raw["RPC_URL"]
    if not isinstance(rpc_url, str) or not rpc_url.strip():
        raise ConfigurationError("RPC_URL має бути непорожнім рядком")

    min_per_day = _as_int(raw, "MIN_TX_PER_DAY")
    max_per_day = _as_int(raw, "MAX_TX_PER_DAY")
    if min_per_day < 1:
        raise ConfigurationError(f"MIN_TX_PER_DAY має бути >= 1, отримано {min_per_day}")
    _check_range("MIN_TX_PER_DAY", min_per_day, "MAX_TX_PER_DAY", max_per_day)

    min_amount = _as_decimal(raw, "MIN_AMOUNT_ETH")
    max_amount = _as_decimal(raw, "MAX_AMOUNT_ETH")
    _check_range("MIN_AMOUNT_ETH", min_amount, "MAX_AMOUNT_ETH", max_amount)

    min_delay = _as_int(raw, "MIN_DELAY_SEC")
    max_delay = _as_int(raw, "MAX_DELAY_SEC")
    if min_delay < 0:
        raise ConfigurationError(f"MIN_DELAY_SEC має бути >= 0, отримано {min_delay}")
    _check_range("MIN_DELAY_SEC", min_delay, "MAX_DELAY_SEC", max_delay)

    priority_fee = _as_decimal(raw, "PRIORITY_FEE_GWEI")

    # Без цього не визначити, коли починається новий день
    offset = _as_int(raw, "TIMEZONE_OFFSET_MIN")
    if not -MINUTES_PER_DAY < offset < MINUTES_PER_DAY:
        raise ConfigurationError(f"TIMEZONE_OFFSET_MIN має бути в межах ±{MINUTES_PER_DAY - 1}, отримано {offset}")

    destination = raw["PROXY_ADDRESS"]
    if not isinstance(destination, str) or not Web3.is_address(destination):
        raise ConfigurationError(f"PROXY_ADDRESS не схожий на адресу: {destination!r}")

    chain_id = raw.get("CHAIN_ID")
    if chain_id is not None:
        chain_id = _as_int(raw, "CHAIN_ID")

    timeout = CONFIRMATION_TIMEOUT_SEC
    if raw.get("CONFIRMATION_TIMEOUT_SEC") is not None:
        timeout = float(_as_decimal(raw, "CONFIRMATION_TIMEOUT_SEC"))
        if timeout <= 0:
            raise ConfigurationError("CONFIRMATION_TIMEOUT_SEC має бути більше нуля")

    http_proxy = raw.get("HTTP_PROXY") or None
    if http_proxy is not None and not isinstance(http_proxy, str):
        raise ConfigurationError("HTTP_PROXY має бути рядком")

    return Settings(
        rpc_url=rpc_url.strip(),
        min_per_day=min_per_day,
        max_per_day=max_per_day,
        min_amount_eth=min_amount,
        max_amount_eth=max_amount,
        min_delay_seconds=min_delay,
        max_delay_seconds=max_delay,
        priority_fee_gwei=priority_fee,
        boundary_offset_minutes=offset,
        destination=Web3.to_checksum_address(destination),
        chain_id=chain_id,
        confirmation_timeout=timeout,
        http_proxy=normalize_proxy(http_proxy),
    )


def normalize_proxy(raw: Optional[str]) -> Optional[str]:
    if not raw or raw.strip().lower() == "none":
        return None
    raw = raw.strip()
    # host:port:user:pass, як у proxies.txt
    if "://" not in raw and raw.count(":") == 3:
        ip, port, user, pwd = raw.split(":")
        return f"http://{user}:{pwd}@{ip}:{port}"
    return raw


def load_settings(path: str = CONFIG_PATH) -> Settings:
    if not os.path.exists(path):
        raise ConfigurationError(f"Не знайдено файл конфігу: {path}")
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Не вдалося прочитати {path}: {e}") from e
    return parse_settings(raw)


def load_private_key(env_file: str = ENV_FILE) -> str:
    load_dotenv(env_file)
    private_key = os.environ.get(PRIVATE_KEY_ENV, "").strip()
    if not private_key:
        raise ConfigurationError(f"Не задано змінну середовища {PRIVATE_KEY_ENV}")
    try:
        Account.from_key(private_key)
    except (ValueError, TypeError) as e:
        raise ConfigurationError(f"{PRIVATE_KEY_ENV} не є валідним приватним ключем") from e
    return private_key
