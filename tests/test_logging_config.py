"""Structured log output and redaction."""

import json
import logging

from stylegen_app.logging_config import JsonFormatter, correlation_context, log_event, redact_for_log


def test_redaction_masks_tokens_and_image_payloads() -> None:
    scrubbed = redact_for_log(
        {
            "api_token": "hf_secret",
            "headers": {"Authorization": "Bearer hf_secret"},
            "detail": "request failed with Bearer hf_secret attached",
            "image": b"\x89PNG" * 10,
            "url": "data:image/png;base64,AAAA",
            "nested": [{"replicate_api_token": "r8_secret"}],
        }
    )

    assert scrubbed["api_token"] == "[redacted]"
    assert scrubbed["headers"] == "[redacted]"
    assert "hf_secret" not in scrubbed["detail"]
    assert scrubbed["image"] == "[40 bytes]"
    assert scrubbed["url"] == "[redacted-data-url]"
    assert scrubbed["nested"] == [{"replicate_api_token": "[redacted]"}]


def test_long_strings_are_truncated() -> None:
    assert redact_for_log("x" * 2000).endswith("...[truncated]")


def test_json_formatter_includes_event_fields_and_correlation_id() -> None:
    lines = []

    class _Capture(logging.Handler):
        def emit(self, record: logging.LogRecord) -> None:
            lines.append(self.format(record))

    logger = logging.getLogger("tests.logging")
    logger.setLevel(logging.INFO)
    handler = _Capture()
    handler.setFormatter(JsonFormatter())
    logger.addHandler(handler)
    try:
        with correlation_context("corr-123"):
            log_event(logger, logging.INFO, "provider_call_started", provider="huggingface", api_token="hf_x")
    finally:
        logger.removeHandler(handler)

    payload = json.loads(lines[0])
    assert payload["event"] == "provider_call_started"
    assert payload["correlation_id"] == "corr-123"
    assert payload["provider"] == "huggingface"
    assert payload["api_token"] == "[redacted]"
    assert payload["level"] == "INFO"
