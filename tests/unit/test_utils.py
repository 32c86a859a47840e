"""Unit tests for utilities."""

import json
import uuid

from lessonchat.utils.ids import generate_block_id
from lessonchat.utils.logging import configure_logging, get_logger


class TestBlockIds:
    """Test block id generation."""

    def test_ids_are_unique(self):
        """Test that fresh ids never repeat."""
        ids = {generate_block_id() for _ in range(100)}

        assert len(ids) == 100

    def test_id_format(self):
        """Test that ids are UUID v4 hex strings."""
        result = generate_block_id()

        parsed = uuid.UUID(hex=result)
        assert parsed.hex == result
        assert parsed.version == 4


class TestLogging:
    """Test structured logging setup."""

    def test_json_lines_written(self, tmp_path):
        """Test events are written as JSON with their context."""
        log_file = tmp_path / "logs" / "lessonchat.log"
        configure_logging(log_file)

        get_logger("lessonchat.test").info("block_deleted", block_id="abc", index=2)

        record = json.loads(log_file.read_text().splitlines()[-1])
        assert record["event"] == "block_deleted"
        assert record["block_id"] == "abc"
        assert record["level"] == "info"
        assert "timestamp" in record

    def test_level_from_environment(self, tmp_path, monkeypatch):
        """Test LESSONCHAT_LOG_LEVEL filters lower levels."""
        monkeypatch.setenv("LESSONCHAT_LOG_LEVEL", "warning")
        log_file = tmp_path / "lessonchat.log"
        configure_logging(log_file)

        logger = get_logger("lessonchat.test.level")
        logger.info("ignored")
        logger.warning("kept")

        events = [json.loads(line)["event"] for line in log_file.read_text().splitlines()]
        assert events == ["kept"]

    def test_default_location(self, isolated_home):
        """Test the default log file lives under ~/.cache."""
        configure_logging()

        assert (isolated_home / ".cache" / "lessonchat" / "logs").is_dir()

    def test_reconfigure_switches_file(self, tmp_path):
        """Test an existing logger follows a new log file."""
        logger = get_logger("lessonchat.test.switch")
        first = tmp_path / "first.log"
        second = tmp_path / "second.log"

        configure_logging(first)
        logger.info("before_switch")
        configure_logging(second)
        logger.info("after_switch")

        assert "before_switch" in first.read_text()
        assert "after_switch" not in first.read_text()
        assert json.loads(second.read_text().splitlines()[-1])["event"] == "after_switch"
