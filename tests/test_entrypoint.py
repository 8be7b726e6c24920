import main
from autobridge.errors import ConfigurationError, FatalRuntimeError


def test_configuration_error_exits_non_zero(monkeypatch, capsys):
    def broken_config(path):
        raise ConfigurationError("MIN_TX_PER_DAY (5) більше за MAX_TX_PER_DAY (2)")

    monkeypatch.setattr(main, "load_settings", broken_config)
    assert main.run() == 1
    assert "Помилка конфігурації" in capsys.readouterr().out


def test_fatal_error_exits_non_zero(monkeypatch, capsys):
    async def exploding_main():
        raise FatalRuntimeError("boom")

    monkeypatch.setattr(main, "main", exploding_main)
    assert main.run() == 1
    assert "CRITICAL ERROR" in capsys.readouterr().out


def test_clean_stop_exits_zero(monkeypatch):
    async def stopped_main():
        return None

    monkeypatch.setattr(main, "main", stopped_main)
    assert main.run() == 0
