"""
Stream payload decoder.

Payloads are untagged: the event type is inferred from which keys are present.
Several shapes are strict subsets of others (a mini ticker's keys are all in a
day ticker, an index price's keys are all in a mark price), so candidates are
tried in a fixed order, most specific first, and the first model whose
required keys are present and which validates wins.

Combined-stream envelopes ``{"stream": ..., "data": {...}}`` are unwrapped
before matching, at most MAX_ENVELOPE_DEPTH levels deep.
"""

from __future__ import annotations

from typing import Any

import orjson
from pydantic import BaseModel, RootModel, ValidationError

from binancekit.errors import UnrecognizedEventError
from binancekit.models.events import (
    AccountUpdateEvent,
    AggrTradesEvent,
    BalanceUpdateEvent,
    BookTickerEvent,
    ContinuousKlineEvent,
    DayTickerAll,
    DayTickerEvent,
    DepthOrderBookEvent,
    Event,
    FuturesOrderUpdateEvent,
    IndexKlineEvent,
    IndexPriceEvent,
    KlineEvent,
    LiquidationEvent,
    MarkPriceAll,
    MarkPriceEvent,
    MiniTickerAll,
    MiniTickerEvent,
    OrderBook,
    OrderTradeEvent,
    TradeEvent,
    UserDataStreamExpiredEvent,
)

MAX_ENVELOPE_DEPTH = 4
ENVELOPE_KEY = "data"

# Order matters: see module docstring.
EVENT_PRECEDENCE: tuple[type[BaseModel], ...] = (
    OrderTradeEvent,
    DayTickerEvent,
    FuturesOrderUpdateEvent,  # before LiquidationEvent (e, E, o)
    AccountUpdateEvent,
    BalanceUpdateEvent,
    DepthOrderBookEvent,
    BookTickerEvent,
    AggrTradesEvent,
    TradeEvent,
    MarkPriceEvent,  # before IndexPriceEvent (e, E, i, p)
    MiniTickerEvent,
    ContinuousKlineEvent,
    IndexKlineEvent,
    KlineEvent,
    IndexPriceEvent,
    LiquidationEvent,
    OrderBook,
    UserDataStreamExpiredEvent,
)

# An empty list decodes as the first entry.
LIST_PRECEDENCE: tuple[type[RootModel[Any]], ...] = (
    DayTickerAll,
    MiniTickerAll,
    MarkPriceAll,
)


def _required_keys(model: type[BaseModel]) -> frozenset[str]:
    return frozenset(
        field.alias or name for name, field in model.model_fields.items() if field.is_required()
    )


_REQUIRED_KEYS: dict[type[BaseModel], frozenset[str]] = {
    model: _required_keys(model) for model in EVENT_PRECEDENCE
}


def required_keys(model: type[BaseModel]) -> frozenset[str]:
    """Wire keys that must all be present for ``model`` to be tried."""
    return _REQUIRED_KEYS[model]


def _match_object(payload: dict[str, Any]) -> Event | None:
    for model in EVENT_PRECEDENCE:
        if not _REQUIRED_KEYS[model].issubset(payload):
            continue
        try:
            return model.model_validate(payload)  # type: ignore[return-value]
        except ValidationError:
            continue
    return None


def _match_list(payload: list[Any]) -> Event | None:
    for model in LIST_PRECEDENCE:
        try:
            return model.model_validate(payload)  # type: ignore[return-value]
        except ValidationError:
            continue
    return None


def _decode(value: Any, depth: int) -> Event | None:
    if isinstance(value, dict):
        if ENVELOPE_KEY in value:
            if depth >= MAX_ENVELOPE_DEPTH:
                return None
            return _decode(value[ENVELOPE_KEY], depth + 1)
        return _match_object(value)
    if isinstance(value, list):
        return _match_list(value)
    return None


def decode_value(value: Any, depth: int = 0) -> Event:
    """
    Classify an already parsed JSON value.

    Raises:
        UnrecognizedEventError: No event shape matched.
    """
    event = _decode(value, depth)
    if event is None:
        raise UnrecognizedEventError(orjson.dumps(value).decode("utf-8"))
    return event


def decode(raw: str | bytes) -> Event:
    """
    Parse and classify one stream message.

    Raises:
        UnrecognizedEventError: Text is not JSON or matched no event shape;
            ``raw`` carries the original text.
    """
    text = raw.decode("utf-8", errors="replace") if isinstance(raw, bytes) else raw
    try:
        value = orjson.loads(raw)
    except orjson.JSONDecodeError as e:
        raise UnrecognizedEventError(text, f"Malformed event: {e}") from e

    event = _decode(value, 0)
    if event is None:
        raise UnrecognizedEventError(text)
    return event
