class ConfigurationError(Exception):
    """Невірні або відсутні параметри запуску чи ключ гаманця."""


class TransportError(Exception):
    """RPC недоступний, відхилив запит або не дочекались відповіді."""


class FatalRuntimeError(Exception):
    """Щось вилетіло за межі однієї спроби, далі працювати не можна."""
