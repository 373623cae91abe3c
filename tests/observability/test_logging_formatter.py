import json
import logging
import sys

from opentelemetry import trace
from opentelemetry.trace import NonRecordingSpan, SpanContext, TraceFlags

from collabora_tokens.observability.logging import (
    ExtrasFormatter,
    OtelContextLogFilter,
    build_log_config,
)


def make_record(msg: str, *, level: int = logging.DEBUG, exc_info=None) -> logging.LogRecord:
    return logging.LogRecord(
        name="collabora_tokens.file_tokens",
        level=level,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )


def test_formatter_appends_data_outside_managed_runtimes(monkeypatch) -> None:
    monkeypatch.delenv("K_SERVICE", raising=False)
    monkeypatch.delenv("KUBERNETES_SERVICE_HOST", raising=False)
    formatter = ExtrasFormatter("%(levelname)s %(name)s: %(message)s")

    record = make_record("new token created")
    record.data = {"file_id": "doc1", "user": "alice", "timeout_seconds": 3600}
    record.json_fields = {"otel": {"trace_id": "abc"}}

    rendered = formatter.format(record)

    assert rendered.startswith("DEBUG collabora_tokens.file_tokens: new token created | data=")
    assert '"file_id":"doc1"' in rendered
    assert "otel" not in rendered


def test_formatter_emits_json_payload_in_cloud_run(monkeypatch) -> None:
    monkeypatch.setenv("K_SERVICE", "collabora-host")
    formatter = ExtrasFormatter("%(levelname)s %(name)s: %(message)s")

    record = make_record("edit right changed for existing token")
    record.data = {"file_id": "doc1", "has_edit": False, "raw": b"abc"}
    record.json_fields = {"otel": {"trace_id": "abc"}}

    payload = json.loads(formatter.format(record))

    assert payload["message"] == "edit right changed for existing token"
    assert payload["severity"] == "DEBUG"
    assert payload["logger"] == "collabora_tokens.file_tokens"
    assert payload["data"]["has_edit"] is False
    assert payload["data"]["raw"] == "<bytes len=3>"
    assert payload["otel"]["trace_id"] == "abc"


def test_formatter_emits_exception_in_kubernetes(monkeypatch) -> None:
    monkeypatch.delenv("K_SERVICE", raising=False)
    monkeypatch.setenv("KUBERNETES_SERVICE_HOST", "10.0.0.1")
    formatter = ExtrasFormatter("%(levelname)s %(name)s: %(message)s")

    try:
        raise RuntimeError("authorization backend down")
    except RuntimeError:
        exc_info = sys.exc_info()

    payload = json.loads(formatter.format(make_record("acquire failed", level=logging.ERROR, exc_info=exc_info)))

    assert payload["severity"] == "ERROR"
    assert "RuntimeError: authorization backend down" in payload["exception"]


def test_otel_filter_injects_span_context() -> None:
    span_context = SpanContext(
        trace_id=0x1234,
        span_id=0x5678,
        is_remote=False,
        trace_flags=TraceFlags(TraceFlags.SAMPLED),
    )
    record = make_record("token deleted")

    with trace.use_span(NonRecordingSpan(span_context)):
        assert OtelContextLogFilter().filter(record) is True

    assert record.json_fields["otel"]["trace_id"] == f"{0x1234:032x}"
    assert record.json_fields["otel"]["span_id"] == f"{0x5678:016x}"


def test_otel_filter_leaves_record_alone_without_context() -> None:
    record = make_record("token deleted")

    assert OtelContextLogFilter().filter(record) is True
    assert "json_fields" not in record.__dict__


def test_build_log_config_honours_package_level(monkeypatch) -> None:
    monkeypatch.setenv("COLLABORA_TOKENS_LOG_LEVEL", "debug")
    monkeypatch.setenv("HOST_LOG_LEVEL", "warning")

    config = build_log_config(
        root_level_env="HOST_LOG_LEVEL",
        root_default="INFO",
        extra_loggers={"host.app": {"level": "INFO"}},
    )

    assert config["root"]["level"] == "WARNING"
    assert config["loggers"]["collabora_tokens"]["level"] == "DEBUG"
    assert config["loggers"]["host.app"] == {"level": "INFO"}
    assert config["handlers"]["console"]["filters"] == ["otel_context"]
