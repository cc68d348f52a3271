"""Tests for the Langfuse tracing wrapper."""
from sms_inspector.langfuse_tracer import LangfuseTracer


class FakeSpan:
    def __init__(self, log: list, name: str):
        self.log = log
        self.name = name

    def update(self, **kwargs):
        self.log.append(("update", self.name, kwargs))

    def end(self):
        self.log.append(("end", self.name))


class FakeLangfuse:
    def __init__(self):
        self.log = []

    def create_trace_id(self):
        return "trace-1"

    def start_span(self, trace_context, name, **kwargs):
        self.log.append(("start", name))
        return FakeSpan(self.log, name)

    def flush(self):
        self.log.append(("flush",))


def test_disabled_without_public_key(monkeypatch):
    monkeypatch.delenv("LANGFUSE_PUBLIC_KEY", raising=False)

    tracer = LangfuseTracer()

    assert tracer.is_enabled() is False
    assert tracer.create_trace("sms.mdr_full:get_list") is None
    # No-ops on a missing trace
    tracer.add_span(None, "parse_csv")
    tracer.end_trace(None)


def test_trace_lifecycle(monkeypatch):
    monkeypatch.delenv("LANGFUSE_PUBLIC_KEY", raising=False)
    tracer = LangfuseTracer()
    fake = FakeLangfuse()
    tracer.enabled = True
    tracer.client = fake

    trace = tracer.create_trace("sms.mdr_full:get_list", metadata={"filter": {}})
    tracer.add_span(trace, "parse_csv", output_text="2 records")
    tracer.end_trace(trace)

    assert fake.log == [
        ("start", "sms.mdr_full:get_list"),
        ("start", "parse_csv"),
        ("update", "parse_csv", {"output": "2 records"}),
        ("end", "parse_csv"),
        ("end", "sms.mdr_full:get_list"),
        ("flush",),
    ]
    assert trace.root_span is None


def test_span_failure_is_swallowed(monkeypatch):
    monkeypatch.delenv("LANGFUSE_PUBLIC_KEY", raising=False)
    tracer = LangfuseTracer()
    fake = FakeLangfuse()
    tracer.enabled = True
    tracer.client = fake
    trace = tracer.create_trace("sms.mdr_full:get_list")

    def broken_start_span(*args, **kwargs):
        raise RuntimeError("collector down")

    fake.start_span = broken_start_span
    tracer.add_span(trace, "parse_csv")
