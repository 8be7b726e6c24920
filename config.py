import os

BASE_DIR = os.path.dirname(os.path.abspath(__file__))

# Файли налаштувань
CONFIG_PATH = os.environ.get("AUTOBRIDGE_CONFIG", os.path.join(BASE_DIR, "config.json"))
ENV_FILE = os.path.join(BASE_DIR, ".env")
PRIVATE_KEY_ENV = "PRIVATE_KEY"

# Очікування
COUNTDOWN_TICK_SECONDS = 5              # Як часто оновлювати зворотний відлік до нового дня, сек
CONFIRMATION_TIMEOUT_SEC = 600          # Скільки чекати підтвердження транзакції, сек
RPC_REQUEST_TIMEOUT = 15                # Таймаут одного RPC запиту, сек
