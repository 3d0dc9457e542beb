"""Tests for the engine tracer (LEDGER_ENGINE_TRACE)."""

from datetime import date
from decimal import Decimal

from ledger_engines.balance import aggregate
from ledger_engines.tracer import compute_input_fingerprint, traced_engine
from ledger_kernel.domain.ledger import EntryKind


class TestFingerprint:
    def test_deterministic(self):
        args = {"capacity": 17, "rows": [1, 2, 3]}
        assert compute_input_fingerprint(("capacity", "rows"), args) == \
            compute_input_fingerprint(("capacity", "rows"), dict(args))

    def test_sensitive_to_values(self):
        a = compute_input_fingerprint(("amount",), {"amount": Decimal("1.00")})
        b = compute_input_fingerprint(("amount",), {"amount": Decimal("1.01")})
        assert a != b
        assert len(a) == 16

    def test_dict_key_order_ignored(self):
        a = compute_input_fingerprint(("m",), {"m": {"x": 1, "y": 2}})
        b = compute_input_fingerprint(("m",), {"m": {"y": 2, "x": 1}})
        assert a == b

    def test_enums_and_dates(self):
        fp = compute_input_fingerprint(
            ("kind", "on"), {"kind": EntryKind.DEBIT, "on": date(2024, 1, 1)},
        )
        assert fp == compute_input_fingerprint(
            ("kind", "on"), {"kind": EntryKind.DEBIT, "on": date(2024, 1, 1)},
        )


class TestTracedEngine:
    def test_emits_trace(self, captured_logs):
        @traced_engine("demo", "2.1", fingerprint_fields=("x",))
        def double(x):
            return x * 2

        assert double(21) == 42

        traces = [r for r in captured_logs() if r["message"] == "LEDGER_ENGINE_TRACE"]
        assert len(traces) == 1
        assert traces[0]["engine_name"] == "demo"
        assert traces[0]["engine_version"] == "2.1"
        assert traces[0]["input_fingerprint"] == compute_input_fingerprint(("x",), {"x": 21})

    def test_positional_and_keyword_calls_match(self, captured_logs):
        @traced_engine("demo", "1.0", fingerprint_fields=("x",))
        def identity(x):
            return x

        identity(5)
        identity(x=5)
        fps = [
            r["input_fingerprint"] for r in captured_logs()
            if r["message"] == "LEDGER_ENGINE_TRACE"
        ]
        assert fps[0] == fps[1]

    def test_aggregator_is_traced(self, captured_logs, example_entries):
        aggregate(example_entries)
        assert any(
            r.get("engine_name") == "balance" for r in captured_logs()
            if r["message"] == "LEDGER_ENGINE_TRACE"
        )
