"""Unit tests for runtime configuration."""

import pytest

from anyflux import Config, configure, get_config, reset_config


@pytest.mark.unit
def test_config_defaults_enable_everything(monkeypatch):
    """Without environment overrides both switches default to on"""
    monkeypatch.delenv("ANYFLUX_FUTURE_REDUCTIONS", raising=False)
    monkeypatch.delenv("ANYFLUX_DETECT_CROSS_THREAD", raising=False)
    reset_config()

    assert get_config() == Config(future_reductions=True, detect_cross_thread=True)


@pytest.mark.unit
@pytest.mark.parametrize("raw", ["0", "false", "No", " off "])
def test_config_reads_false_values_from_environment(monkeypatch, raw):
    """Falsy environment strings turn a switch off"""
    monkeypatch.setenv("ANYFLUX_FUTURE_REDUCTIONS", raw)
    reset_config()

    assert get_config().future_reductions is False


@pytest.mark.unit
def test_config_ignores_empty_environment_value(monkeypatch):
    monkeypatch.setenv("ANYFLUX_DETECT_CROSS_THREAD", "")
    reset_config()

    assert get_config().detect_cross_thread is True


@pytest.mark.unit
def test_configure_overrides_single_option():
    """configure() changes only the named option"""
    before = get_config()

    after = configure(future_reductions=False)

    assert after.future_reductions is False
    assert after.detect_cross_thread == before.detect_cross_thread
    assert get_config() is after


@pytest.mark.unit
def test_configure_rejects_unknown_option():
    with pytest.raises(TypeError, match="no_such_option"):
        configure(no_such_option=True)


@pytest.mark.unit
def test_reset_config_drops_overrides(monkeypatch):
    monkeypatch.delenv("ANYFLUX_FUTURE_REDUCTIONS", raising=False)
    configure(future_reductions=False)

    reset_config()

    assert get_config().future_reductions is True
