from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeoutError
from collections.abc import Mapping
from typing import Any, Optional, Protocol, Union

from pydantic import TypeAdapter, ValidationError

from config import settings, logger
from db.dosing_vocabulary import normalize_unit
from models.schemas import ParsedDosing, SimpleDosing, RangeDosing, ComplexDosing
from services.sig_interpreter import interpret

PARSED_DOSING_ADAPTER = TypeAdapter(ParsedDosing)


class ParsingStrategy(Protocol):
    """Anything that can stand in for the rule-based SIG interpreter.

    A strategy may return a ParsedDosing or a plain mapping in the same
    shape (e.g. decoded JSON from a language model); mappings are validated
    before use.
    """

    def parse(self, text: str) -> Union[ParsedDosing, Mapping[str, Any], None]:
        ...


def coerce_parsed_dosing(result: Any, text: str) -> Optional[ParsedDosing]:
    """Validate a strategy result, or return None if it is unusable."""
    if isinstance(result, (SimpleDosing, RangeDosing, ComplexDosing)):
        return result
    if not isinstance(result, Mapping):
        return None

    data = dict(result)
    if "kind" not in data:
        if data.get("schedule"):
            data["kind"] = "complex"
        elif data.get("max_dose") is not None:
            data["kind"] = "range"
        else:
            data["kind"] = "simple"
    if data.get("unit"):
        data["unit"] = normalize_unit(data["unit"])
    data.setdefault("instructions", text)

    try:
        return PARSED_DOSING_ADAPTER.validate_python(data)
    except ValidationError as e:
        logger.warning(f"Parsing strategy returned an invalid dosing: {e.error_count()} error(s)")
        return None


class FallbackSigInterpreter:
    """Runs a pluggable parsing strategy with a time limit, falling back to rules.

    Whatever goes wrong with the primary strategy (an exception, a timeout,
    an unusable result) the rule-based interpreter answers instead, so
    interpret() keeps the never-fails contract.
    """

    def __init__(self, primary: Optional[ParsingStrategy] = None, timeout_seconds: Optional[float] = None):
        self.primary = primary
        self.timeout_seconds = settings.parser_timeout_seconds if timeout_seconds is None else timeout_seconds

    def interpret(self, text: str) -> ParsedDosing:
        if self.primary is None:
            return interpret(text)

        executor = ThreadPoolExecutor(max_workers=1)
        try:
            future = executor.submit(self.primary.parse, text)
            result = future.result(timeout=self.timeout_seconds)
        except FutureTimeoutError:
            logger.warning(f"Parsing strategy timed out after {self.timeout_seconds}s, using rule-based parser")
            return interpret(text)
        except Exception as e:
            logger.warning(f"Parsing strategy failed: {e}. Using rule-based parser")
            return interpret(text)
        finally:
            # Do not wait for a strategy that overran its time limit
            executor.shutdown(wait=False, cancel_futures=True)

        parsed = coerce_parsed_dosing(result, text)
        if parsed is None:
            logger.info("Parsing strategy gave no usable result, using rule-based parser")
            return interpret(text)
        return parsed

    __call__ = interpret
