"""Tests for configuration helpers, logging setup and the error taxonomy."""

import json
import logging

import pytest

from lendflow.core.config import env_bool, env_list
from lendflow.core.exceptions import (
    ConflictError,
    InvalidArgumentError,
    InvalidStateError,
    LendFlowError,
    NotFoundError,
    StoreUnavailableError,
)
from lendflow.core.logging import JsonFormatter, setup_logging
from lendflow.utils.database import check_connection, make_engine
from lendflow.utils.http_errors import http_error


class TestConfig:
    @pytest.mark.parametrize("raw, expected", [("1", True), ("TRUE", True), ("yes", True), ("off", False), ("0", False)])
    def test_env_bool(self, monkeypatch, raw, expected) -> None:
        monkeypatch.setenv("LENDFLOW_FLAG", raw)
        assert env_bool("LENDFLOW_FLAG") is expected

    def test_env_bool_default(self, monkeypatch) -> None:
        monkeypatch.delenv("LENDFLOW_FLAG", raising=False)
        assert env_bool("LENDFLOW_FLAG", True) is True

    def test_env_list(self, monkeypatch) -> None:
        monkeypatch.setenv("LENDFLOW_ORIGINS", " http://a , ,http://b ")
        assert env_list("LENDFLOW_ORIGINS", "") == ["http://a", "http://b"]


class TestLogging:
    def test_json_formatter(self) -> None:
        record = logging.LogRecord("lendflow.test", logging.INFO, __file__, 1, "paid %s", ("100.00",), None)

        data = json.loads(JsonFormatter().format(record))

        assert data["level"] == "INFO"
        assert data["logger"] == "lendflow.test"
        assert data["message"] == "paid 100.00"

    def test_setup_logging_installs_one_handler(self) -> None:
        setup_logging("debug", "json")
        setup_logging("WARNING", "standard")

        root = logging.getLogger()
        assert len(root.handlers) == 1
        assert root.level == logging.WARNING
        assert logging.getLogger("uvicorn.access").level == logging.WARNING


class TestExceptions:
    def test_details_default_to_empty(self) -> None:
        e = InvalidArgumentError("bad amount")
        assert str(e) == "bad amount"
        assert e.details == {}

    def test_not_found_names_entity(self) -> None:
        e = NotFoundError("Loan", "LOAN-1")
        assert e.message == "Loan not found"
        assert e.details == {"entity": "Loan", "id": "LOAN-1"}

    @pytest.mark.parametrize(
        "error, code",
        [
            (NotFoundError("Loan", "LOAN-1"), 404),
            (ConflictError("busy"), 409),
            (InvalidStateError("paid off"), 400),
            (InvalidArgumentError("bad"), 400),
            (LendFlowError("other"), 500),
        ],
    )
    def test_http_mapping(self, error, code) -> None:
        exc = http_error(error)
        assert exc.status_code == code
        assert exc.detail == error.message


class TestDatabase:
    def test_check_connection(self) -> None:
        check_connection(make_engine("sqlite://"))

    def test_unreachable_store(self, tmp_path) -> None:
        missing = tmp_path / "no-such-dir" / "db.sqlite"
        with pytest.raises(StoreUnavailableError):
            check_connection(make_engine(f"sqlite:///{missing}"))
