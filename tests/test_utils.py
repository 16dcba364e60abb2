"""Tests for azorch.utils."""

import json
import logging

import pytest
from rich.logging import RichHandler

from azorch.errors import SpecTypeError
from azorch.utils import StructuredFormatter, get_bool, setup_logging, split_csv


class TestGetBool:
    @pytest.mark.parametrize("value,expected", [
        (True, True), (False, False), ("True", True), ("off", False), (" yes ", True), ("0", False),
    ])
    def test_values(self, value, expected):
        assert get_bool({"k": value}, "k") is expected

    def test_missing_uses_default(self):
        assert get_bool({}, "k") is False
        assert get_bool({"k": None}, "k", default=True) is True

    def test_invalid(self):
        with pytest.raises(SpecTypeError):
            get_bool({"k": 2}, "k")


class TestSplitCsv:
    def test_string(self):
        assert split_csv("a, b,,c ") == ("a", "b", "c")

    def test_list(self):
        assert split_csv(["a", "b"]) == ("a", "b")

    def test_none(self):
        assert split_csv(None) == ()


class TestLogging:
    def test_pretty_uses_rich(self):
        logger = setup_logging(log_level="DEBUG", log_format="pretty")

        assert logger.name == "azorch"
        assert logger.level == logging.DEBUG
        assert any(isinstance(h, RichHandler) for h in logger.handlers)

    def test_file_logging_structured(self, tmp_path):
        log_file = tmp_path / "logs" / "azorch.log"
        logger = setup_logging(log_format="structured", log_file=log_file, console_output=False)

        logging.getLogger("azorch.producer").info("Azkaban project created")
        for handler in logger.handlers:
            handler.flush()

        record = json.loads(log_file.read_text().splitlines()[-1])
        assert record["message"] == "Azkaban project created"
        assert record["level"] == "INFO"
        assert record["logger"] == "azorch.producer"
        for handler in logger.handlers:
            handler.close()
        logger.handlers = []

    def test_structured_formatter_extras(self):
        record = logging.LogRecord("azorch", logging.INFO, __file__, 1, "done", None, None)
        record.project = "azorch_a"
        record.outcome = "created"

        data = json.loads(StructuredFormatter().format(record))

        assert data["project"] == "azorch_a"
        assert data["outcome"] == "created"
