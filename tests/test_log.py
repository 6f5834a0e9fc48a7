"""Tests de setup_logging: nivel efectivo, archivo y re-configuración."""

import logging

import pytest

from geosvg.utils.log import LOG_FILENAME, reset_logging, resolve_level, setup_logging


@pytest.fixture(autouse=True)
def clean_logging():
    reset_logging()
    yield
    reset_logging()


class TestResolveLevel:
    def test_explicit_level_wins(self):
        assert resolve_level(logging.DEBUG, env={"GSV_LOG_LEVEL": "error"}) == logging.DEBUG

    def test_env_when_not_explicit(self):
        assert resolve_level(None, env={"GSV_LOG_LEVEL": "warning"}) == logging.WARNING

    def test_bad_names_fall_back_to_info(self):
        assert resolve_level("loud", env={"GSV_LOG_LEVEL": "nope"}) == logging.INFO
        assert resolve_level(None, env={}) == logging.INFO


class TestSetupLogging:
    def test_writes_log_file(self, tmp_path):
        path = setup_logging(tmp_path / "logs", level="info")
        assert path == tmp_path / "logs" / LOG_FILENAME
        logging.getLogger("geosvg.test").info("hola capas")
        for h in logging.getLogger().handlers:
            h.flush()
        assert "hola capas" in path.read_text(encoding="utf-8")

    def test_no_file(self):
        assert setup_logging(None) is None

    def test_reconfigure_replaces_handlers(self, tmp_path):
        root = logging.getLogger()
        baseline = len(root.handlers)
        setup_logging(tmp_path / "a")
        setup_logging(tmp_path / "b")
        assert len(root.handlers) == baseline + 2
        reset_logging()
        assert len(root.handlers) == baseline
