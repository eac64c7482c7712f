"""Tests for CLI module."""

import pytest
from unittest.mock import patch, AsyncMock, MagicMock

from bouldering.domain.ports.storage_port import PurgeResult
from bouldering.presentation.cli.cli import async_main


def _make_container(**overrides):
    """Create a mock container with sensible defaults."""
    container = MagicMock()
    container.event_bus.handler_info = MagicMock(
        return_value={"TweetDeleted": 1, "TweetMediaDeleted": 1}
    )
    container.outbox_relay = MagicMock()
    container.outbox_relay.relay_once = AsyncMock(return_value=3)
    container.purge_storage_prefix = MagicMock()
    container.purge_storage_prefix.execute = AsyncMock(
        return_value=PurgeResult(prefix="v1/public/users/u1", deleted_count=4)
    )
    for key, value in overrides.items():
        setattr(container, key, value)
    return container


def _run(argv, container):
    return patch("sys.argv", ["bouldering", *argv]), patch(
        "bouldering.composition_root.create_container", return_value=container
    )


class TestCLIHelp:
    """Test all help outputs (no adapter dependencies)."""

    @pytest.mark.asyncio
    async def test_no_command_prints_help(self, capsys):
        with patch("sys.argv", ["bouldering"]):
            await async_main()
        captured = capsys.readouterr()
        assert "tweet API and storage cleanup worker" in captured.out

    @pytest.mark.asyncio
    async def test_help_flag(self):
        with patch("sys.argv", ["bouldering", "--help"]), \
             pytest.raises(SystemExit, match="0"):
            await async_main()

    @pytest.mark.asyncio
    async def test_serve_help(self):
        with patch("sys.argv", ["bouldering", "serve", "--help"]), \
             pytest.raises(SystemExit, match="0"):
            await async_main()

    @pytest.mark.asyncio
    async def test_purge_help(self):
        with patch("sys.argv", ["bouldering", "purge", "--help"]), \
             pytest.raises(SystemExit, match="0"):
            await async_main()

    @pytest.mark.asyncio
    async def test_verbose_flag(self):
        with patch("sys.argv", ["bouldering", "--verbose"]):
            await async_main()

    @pytest.mark.asyncio
    async def test_debug_json_logs_flag(self):
        with patch("sys.argv", ["bouldering", "--debug", "--json-logs"]):
            await async_main()


class TestCLICommands:
    """Test CLI command execution with mocked composition root."""

    @pytest.mark.asyncio
    async def test_handlers(self, capsys):
        container = _make_container()
        argv, factory = _run(["handlers"], container)
        with argv, factory:
            await async_main()

        out = capsys.readouterr().out
        assert "TweetDeleted: 1" in out
        assert "TweetMediaDeleted: 1" in out
        container.close.assert_called_once()

    @pytest.mark.asyncio
    async def test_relay_outbox(self, capsys):
        container = _make_container()
        argv, factory = _run(["relay-outbox", "--limit", "10"], container)
        with argv, factory:
            await async_main()

        container.outbox_relay.relay_once.assert_awaited_once_with(limit=10)
        assert "Dispatched 3 event(s)" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_relay_outbox_disabled(self, capsys):
        container = _make_container(outbox_relay=None)
        argv, factory = _run(["relay-outbox"], container)
        with argv, factory, pytest.raises(SystemExit, match="1"):
            await async_main()

        assert "Outbox is not enabled" in capsys.readouterr().out
        container.close.assert_called_once()

    @pytest.mark.asyncio
    async def test_purge_success(self, capsys):
        container = _make_container()
        argv, factory = _run(["purge", "v1/public/users/u1"], container)
        with argv, factory:
            await async_main()

        container.purge_storage_prefix.execute.assert_awaited_once_with("v1/public/users/u1")
        assert "Deleted 4 object(s)" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_purge_partial_failure(self, capsys):
        container = _make_container()
        container.purge_storage_prefix.execute = AsyncMock(
            return_value=PurgeResult(prefix="p", deleted_count=1, errors=["boom"])
        )
        argv, factory = _run(["purge", "p"], container)
        with argv, factory, pytest.raises(SystemExit, match="1"):
            await async_main()

        assert "Purge incomplete" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_purge_error(self, capsys):
        container = _make_container()
        container.purge_storage_prefix.execute = AsyncMock(
            side_effect=RuntimeError("no credentials")
        )
        argv, factory = _run(["purge", "p"], container)
        with argv, factory, pytest.raises(SystemExit, match="1"):
            await async_main()

        assert "Purge Failed: no credentials" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_container_failure(self, capsys):
        with patch("sys.argv", ["bouldering", "handlers"]), \
             patch("bouldering.composition_root.create_container",
                   side_effect=RuntimeError("db locked")), \
             pytest.raises(SystemExit, match="1"):
            await async_main()

        assert "Failed to initialise: db locked" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_config_path_passed(self, tmp_path):
        config_file = tmp_path / "bouldering.json"
        config_file.write_text('{"storage": {"bucket_name": "from-file"}}')
        container = _make_container()

        with patch("sys.argv", ["bouldering", "--config", str(config_file), "handlers"]), \
             patch("bouldering.composition_root.create_container",
                   return_value=container) as factory:
            await async_main()

        config = factory.call_args[0][0]
        assert config.storage.bucket_name == "from-file"
