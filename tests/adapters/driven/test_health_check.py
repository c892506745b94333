"""Tests for health check validator."""

from unittest.mock import Mock, patch

from src.adapters.driven.config.health_check import main
from src.ports.settings import SenderSettingsPort

__all__ = []


def make_settings(**kwargs: object) -> Mock:
    """Create loaded settings wrapping a port."""
    settings = Mock()
    settings.to_port.return_value = SenderSettingsPort(sink="http://sink", **kwargs)
    return settings


def test_health_check_success() -> None:
    """Health check should return 0 when configuration loads successfully."""
    with (
        patch("src.adapters.driven.config.health_check.configure_logs"),
        patch("src.adapters.driven.config.health_check.load_settings") as mock_load,
    ):
        mock_load.return_value = make_settings(input_body="hello")
        result = main()

    assert result == 0


def test_health_check_failure_on_config_error() -> None:
    """Health check should return 1 when configuration fails to load."""
    with (
        patch("src.adapters.driven.config.health_check.configure_logs"),
        patch("src.adapters.driven.config.health_check.load_settings") as mock_load,
    ):
        mock_load.side_effect = RuntimeError("Invalid configuration")
        result = main()

    assert result == 1


def test_health_check_failure_without_input() -> None:
    """Health check should return 1 when there is nothing to send."""
    with (
        patch("src.adapters.driven.config.health_check.configure_logs"),
        patch("src.adapters.driven.config.health_check.load_settings") as mock_load,
    ):
        mock_load.return_value = make_settings()
        result = main()

    assert result == 1
