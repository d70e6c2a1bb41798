import logging
import os
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from simple_api import main as entry
from simple_api.core.config import Config
from simple_api.core.errors import ServerError
from simple_api.core.logging_setup import TRACE_LEVEL, to_logging_level


@pytest.fixture
def quiet_entry():
    """Keep main() from touching .env files and the root logger."""
    with patch.object(entry, "load_dotenv") as load_dotenv, patch.object(
        entry, "configure_logging"
    ) as configure_logging:
        yield load_dotenv, configure_logging


class TestMain:
    @patch.dict(os.environ, {"PORT": "not-a-port"}, clear=True)
    def test_invalid_configuration_exits_1(self, quiet_entry, caplog):
        with patch.object(entry, "ServerManager") as manager_cls, caplog.at_level(logging.ERROR):
            assert entry.main() == 1
        manager_cls.assert_not_called()
        assert "PORT" in caplog.text

    @patch.dict(os.environ, {"PORT": "9000", "PORT_APP": "9001", "LOG_LEVEL": "debug"}, clear=True)
    def test_graceful_shutdown_exits_0(self, quiet_entry):
        load_dotenv, configure_logging = quiet_entry
        manager = MagicMock()
        manager.run = AsyncMock(return_value=None)

        with patch.object(entry, "ServerManager", return_value=manager) as manager_cls:
            assert entry.main() == 0

        load_dotenv.assert_called_once()
        configure_logging.assert_called_with("debug")
        config = manager_cls.call_args.args[0]
        assert isinstance(config, Config)
        assert (config.main_port, config.app_port) == (9000, 9001)
        assert manager_cls.call_args.kwargs == {"install_signal_handlers": True}
        manager.run.assert_awaited_once()

    @patch.dict(os.environ, {}, clear=True)
    def test_server_error_exits_1(self, quiet_entry, caplog):
        manager = MagicMock()
        manager.run = AsyncMock(side_effect=ServerError("main server failed to bind 0.0.0.0:8080"))

        with patch.object(entry, "ServerManager", return_value=manager), caplog.at_level(logging.ERROR):
            assert entry.main() == 1
        assert "0.0.0.0:8080" in caplog.text


class TestLoggingLevels:
    @pytest.mark.parametrize(
        "level, expected",
        [("trace", TRACE_LEVEL), ("debug", logging.DEBUG), ("info", logging.INFO), ("critical", logging.CRITICAL)],
    )
    def test_to_logging_level(self, level, expected):
        assert to_logging_level(level) == expected
