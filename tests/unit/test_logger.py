"""
Tests for logger setup (loguru sinks and the stdlib fallback).
"""

import logging

from loguru import logger as loguru_logger

from readerfirst.utils.logger import InterceptHandler, LoguruWrapper, get_logger, setup_logger


class TestSetupLogger:

    def teardown_method(self):
        loguru_logger.remove()
        std_logger = logging.getLogger("readerfirst")
        std_logger.handlers = []
        std_logger.propagate = True

    def test_loguru_routes_module_loggers_to_file(self, tmp_path):
        log_file = tmp_path / "logs" / "readerfirst.log"
        wrapper = setup_logger(level="INFO", log_file=str(log_file))

        assert isinstance(wrapper, LoguruWrapper)
        assert isinstance(logging.getLogger("readerfirst").handlers[0], InterceptHandler)

        logging.getLogger("readerfirst.core.pipeline").warning("Retrying chunk 3")
        logging.getLogger("readerfirst.core.pipeline").debug("Cache hit for openai:abc")
        loguru_logger.complete()

        content = log_file.read_text(encoding="utf-8")
        assert "Retrying chunk 3" in content
        assert "Cache hit" not in content

    def test_stdlib_fallback(self, tmp_path):
        log_file = tmp_path / "plain.log"
        logger = setup_logger(name="readerfirst.plain", level="DEBUG", log_file=str(log_file), use_loguru=False)

        assert isinstance(logger, logging.Logger)
        logger.info("plain message")
        for handler in logger.handlers:
            handler.flush()

        assert "plain message" in log_file.read_text(encoding="utf-8")

        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)

    def test_get_logger(self, tmp_path):
        log_file = tmp_path / "bound.log"
        loguru_logger.remove()
        loguru_logger.add(str(log_file), level="INFO")

        get_logger("readerfirst.cli").info("bound message")

        assert "bound message" in log_file.read_text(encoding="utf-8")
