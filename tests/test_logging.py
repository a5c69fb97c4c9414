"""
StarChain - Logging Tests
===========================
Tests for structured logging and the audit trail.
"""

import json
import logging

from star_chain.config import ChainSettings
from star_chain.domain.blockchain import Blockchain
from star_chain.logging_setup import (
    JSONFormatter,
    PerformanceLogger,
    get_logger,
    setup_logging,
)


class TestStructuredLogging:
    """Test logger helpers"""

    def test_category_logger_name(self):
        """Test category namespace"""
        assert get_logger("blockchain").name == "starchain.blockchain"

    def test_json_formatter_extra_data(self):
        """Test extra_data is serialized"""
        record = logging.LogRecord(
            "starchain.test", logging.INFO, __file__, 1, "Block added", None, None
        )
        record.extra_data = {"height": 3}

        data = json.loads(JSONFormatter().format(record))

        assert data["message"] == "Block added"
        assert data["level"] == "INFO"
        assert data["extra_data"] == {"height": 3}

    def test_performance_logger(self):
        """Test elapsed time is measured"""
        with PerformanceLogger(get_logger("test"), "noop") as perf:
            pass

        assert perf.elapsed_ms is not None
        assert perf.elapsed_ms >= 0

    def test_setup_logging_files(self, tmp_path):
        """Test file handlers are installed"""
        root = setup_logging(log_level="DEBUG", log_to_file=True, log_dir=tmp_path, enable_console=False)

        root.info("Registry started", extra_data={"height": 0})

        assert (tmp_path / "starchain.log").exists()
        assert (tmp_path / "starchain_errors.log").exists()

        setup_logging(log_level="WARNING", enable_console=False)


class TestAuditTrail:
    """Test audit log records"""

    def test_block_additions_audited(self, tmp_path, fixed_clock):
        """Test genesis and appended blocks land in audit.log"""
        config = ChainSettings(network="regtest", log_to_file=True, log_dir=tmp_path)
        chain = Blockchain(config, clock=fixed_clock)
        block = chain._add_block({"owner": "A1", "star": "s"})

        records = [
            json.loads(line)["extra_data"]
            for line in (tmp_path / "audit.log").read_text().splitlines()
        ]

        assert [r["action"] for r in records] == ["block_added", "block_added"]
        assert records[1]["hash"] == block.hash
        assert records[1]["owner"] == "A1"
