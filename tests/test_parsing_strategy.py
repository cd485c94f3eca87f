import threading

import pytest

from models.schemas import ComplexDosing, RangeDosing, SimpleDosing
from services.parsing_strategy import FallbackSigInterpreter, coerce_parsed_dosing
from services.sig_interpreter import interpret

SIG = "Take 1 tablet by mouth twice daily"


class StubStrategy:
    def __init__(self, result=None, error=None, block=None):
        self.result = result
        self.error = error
        self.block = block
        self.calls = []

    def parse(self, text):
        self.calls.append(text)
        if self.block is not None:
            self.block.wait(1)
        if self.error is not None:
            raise self.error
        return self.result


def test_without_primary_uses_rules():
    assert FallbackSigInterpreter().interpret(SIG) == interpret(SIG)


def test_primary_dosing_is_used():
    dosing = SimpleDosing(dose=3, unit="capsule", frequency=1, instructions=SIG)
    strategy = StubStrategy(result=dosing)

    parsed = FallbackSigInterpreter(strategy).interpret(SIG)

    assert parsed == dosing
    assert strategy.calls == [SIG]


def test_primary_mapping_is_validated():
    strategy = StubStrategy(result={"dose": 2, "unit": "tablets", "frequency": 3})

    parsed = FallbackSigInterpreter(strategy).interpret(SIG)

    assert isinstance(parsed, SimpleDosing)
    assert parsed.unit == "tablet"
    assert parsed.frequency == 3
    assert parsed.instructions == SIG


def test_mapping_kind_is_inferred():
    complex_result = coerce_parsed_dosing({
        "dose": 1, "unit": "tablet", "frequency": 1, "average_daily_dose": 1,
        "schedule": [{"dose": 1, "frequency": 1, "day_range": "day 1"}],
    }, SIG)
    range_result = coerce_parsed_dosing({
        "dose": 1, "max_dose": 2, "unit": "tablet", "frequency": 4, "average_daily_dose": 1.5,
    }, SIG)

    assert isinstance(complex_result, ComplexDosing)
    assert isinstance(range_result, RangeDosing)


@pytest.mark.parametrize("strategy", [
    StubStrategy(error=RuntimeError("model unavailable")),
    StubStrategy(result=None),
    StubStrategy(result="two tablets"),
    StubStrategy(result={"dose": 0, "unit": "tablet", "frequency": 2}),
    StubStrategy(result={"kind": "complex", "dose": 1, "unit": "tablet", "frequency": 1,
                         "average_daily_dose": 1, "schedule": []}),
])
def test_unusable_primary_falls_back(strategy):
    assert FallbackSigInterpreter(strategy).interpret(SIG) == interpret(SIG)


def test_slow_primary_falls_back():
    release = threading.Event()
    strategy = StubStrategy(result=SimpleDosing(dose=5, unit="tablet", frequency=5), block=release)
    try:
        parsed = FallbackSigInterpreter(strategy, timeout_seconds=0.05).interpret(SIG)
    finally:
        release.set()

    assert parsed == interpret(SIG)


def test_interpreter_is_callable():
    interpreter = FallbackSigInterpreter()

    assert interpreter(SIG) == interpret(SIG)
