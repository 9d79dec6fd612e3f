"""Tests for structured logging setup."""
import json
import logging

import pytest

from lutpack.utils.logging import (
    JSONFormatter,
    LogConfig,
    LutpackLogger,
    TextFormatter,
    configure_from_cli,
    configure_logging,
    get_cli_args_parser,
    get_logger,
)


def make_record(message="lutSize: 33", name="lutpack.decoders.base", **extra_fields):
    record = logging.LogRecord(name, logging.INFO, __file__, 10, message, None, None)
    if extra_fields:
        record.extra_fields = extra_fields
    return record


class TestLogConfig:
    """Test LogConfig validation."""

    def test_defaults(self):
        config = LogConfig()
        assert config.log_level == "INFO"
        assert config.log_format == "text"

    @pytest.mark.parametrize("kwargs", [
        {"log_level": "LOUD"},
        {"log_format": "xml"},
        {"component_levels": {"decoders": "CHATTY"}},
    ])
    def test_invalid_values(self, kwargs):
        with pytest.raises(ValueError):
            LogConfig(**kwargs)

    def test_dict_round_trip(self):
        config = LogConfig(log_level="DEBUG", log_format="json", component_levels={"cli": "ERROR"})
        assert LogConfig.from_dict(config.to_dict()) == config


class TestFormatters:
    """Test text and JSON output."""

    def test_json_formatter(self):
        output = JSONFormatter().format(make_record(size=33))
        data = json.loads(output)

        assert data["level"] == "INFO"
        assert data["component"] == "base"
        assert data["message"] == "lutSize: 33"
        assert data["size"] == 33

    def test_json_formatter_source(self):
        data = json.loads(JSONFormatter(include_source=True).format(make_record()))
        assert data["source"]["line"] == 10

    def test_text_formatter(self):
        output = TextFormatter(include_timestamp=False).format(make_record(rows=8))

        assert output.startswith("INFO")
        assert "lutSize: 33" in output
        assert output.endswith("[rows=8]")


class TestConfigureLogging:
    """Test global logging configuration."""

    def test_configure_logging_installs_handler(self):
        configure_logging(LogConfig(log_level="DEBUG"))
        root_logger = logging.getLogger("lutpack")

        assert root_logger.level == logging.DEBUG
        assert len(root_logger.handlers) == 1
        assert root_logger.propagate is False

    def test_log_file(self, tmp_path):
        log_file = tmp_path / "logs" / "lutpack.log"
        configure_logging(LogConfig(log_format="json", log_file=str(log_file)))

        logging.getLogger("lutpack.test").warning("written to file")
        for handler in logging.getLogger("lutpack").handlers:
            handler.flush()

        entry = json.loads(log_file.read_text(encoding="utf-8").splitlines()[-1])
        assert entry["message"] == "written to file"

    def test_component_levels(self):
        configure_logging(LogConfig(component_levels={"decoders": "ERROR"}))
        assert logging.getLogger("lutpack.decoders").level == logging.ERROR

    def test_configure_from_cli(self):
        config = configure_from_cli(log_level="debug", log_format="bogus")

        assert config.log_level == "DEBUG"
        assert config.log_format == "text"
        assert logging.getLogger("lutpack").level == logging.DEBUG

    def test_configure_from_cli_defaults_to_warning(self):
        assert configure_from_cli().log_level == "WARNING"

    def test_flags_override_base(self):
        base = LogConfig(log_level="INFO", log_format="json", component_levels={"cli": "ERROR"})

        config = configure_from_cli(log_level="debug", base=base)

        assert config.log_level == "DEBUG"
        assert config.log_format == "json"
        assert config.component_levels == {"cli": "ERROR"}
        assert base.log_level == "INFO"

    def test_cli_flags_default_to_none(self):
        assert all(options["default"] is None for _, options in get_cli_args_parser())


class TestGetLogger:
    """Test structured logger adapter."""

    def test_returns_cached_adapter(self):
        logger = get_logger("cli")

        assert isinstance(logger, LutpackLogger)
        assert get_logger("cli") is logger
        assert logger.logger.name == "lutpack.cli"

    def test_keyword_arguments_become_extra_fields(self):
        logger = get_logger("cli")
        msg, kwargs = logger.process("Packed LUT written", {"size": 33, "exc_info": False})

        assert msg == "Packed LUT written"
        assert kwargs["exc_info"] is False
        assert kwargs["extra"]["extra_fields"] == {"size": 33}
