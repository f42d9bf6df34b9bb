"""Tests for environment-driven settings."""

import logging

from docx_fieldmerge.config import Settings


def test_defaults(monkeypatch):
    for name in ("LOG_LEVEL", "MEDIA_DIR", "REMOVE_TRAILING_BLANK_PAGE"):
        monkeypatch.delenv(f"DOCX_FIELDMERGE_{name}", raising=False)
    settings = Settings(_env_file=None)
    assert settings.log_level == "INFO"
    assert settings.media_dir == "media"
    assert settings.remove_trailing_blank_page is True
    assert settings.process_headers_and_footers is True


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("DOCX_FIELDMERGE_MEDIA_DIR", "images")
    monkeypatch.setenv("DOCX_FIELDMERGE_REMOVE_TRAILING_BLANK_PAGE", "false")
    settings = Settings(_env_file=None)
    assert settings.media_dir == "images"
    assert settings.remove_trailing_blank_page is False


def test_library_logger_has_null_handler():
    handlers = logging.getLogger("docx_fieldmerge").handlers
    assert any(isinstance(handler, logging.NullHandler) for handler in handlers)


def test_configure_logging_is_left_to_the_caller(monkeypatch):
    calls = []
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.append(kwargs))
    settings = Settings(_env_file=None, log_level="debug")
    assert calls == []
    settings.configure_logging()
    assert calls[0]["level"] == "DEBUG"
