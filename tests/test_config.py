import pytest
from pydantic import ValidationError

from greeter import config
from greeter.config import Settings, resolve_hostname


def test_default_port():
    assert Settings.from_env({}).port == 2222


def test_empty_port_uses_default():
    assert Settings.from_env({"PORT": ""}).port == 2222


def test_port_from_env():
    assert Settings.from_env({"PORT": "8080"}).port == 8080


def test_reads_process_environment(monkeypatch):
    monkeypatch.setenv("PORT", "9090")
    assert Settings.from_env().port == 9090


@pytest.mark.parametrize("value", ["abc", "-1", "70000"])
def test_invalid_port(value):
    with pytest.raises(ValidationError):
        Settings.from_env({"PORT": value})


def test_settings_are_frozen():
    settings = Settings.from_env({})
    with pytest.raises(ValidationError):
        settings.port = 1


def test_resolve_hostname_fallback(monkeypatch):
    def fail():
        raise OSError

    monkeypatch.setattr(config.socket, "gethostname", fail)
    assert resolve_hostname() == "unknown"
    assert Settings.from_env({}).hostname == "unknown"
