"""Tests for logger setup."""

from __future__ import annotations

from pathlib import Path

from loguru import logger

from estimator.core.logger import setup_logger


def test_file_lines_carry_request_id(tmp_path: Path) -> None:
    log_file = tmp_path / "logs" / "estimator.log"
    setup_logger(level="DEBUG", log_file=str(log_file))

    logger.info("outside any request")
    with logger.contextualize(request_id="abc123"):
        logger.info("[PRICING] priced quote")
    # removing the sinks flushes and closes the file
    logger.remove()

    lines = log_file.read_text().splitlines()
    assert any("| - |" in line and "outside any request" in line for line in lines)
    assert any("| abc123 |" in line and "[PRICING] priced quote" in line for line in lines)
