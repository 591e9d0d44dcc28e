"""
Shared pytest fixtures: a TradeRecord factory and a fixed evaluation date.
No network calls are made anywhere in the test suite.
"""

import datetime
import itertools
import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest

from models.trade import TradeRecord, TradeType

# Evaluation date used wherever "today" matters, so tests never drift
AS_OF = datetime.date(2024, 6, 1)

_ids = itertools.count(1)


def make_trade(
    symbol="RELIANCE",
    trade_date="2024-01-10",
    trade_type="buy",
    quantity=10,
    price=100.0,
    exchange="NSE",
    isin="INE002A01018",
    trade_id=None,
):
    if isinstance(trade_date, str):
        trade_date = datetime.date.fromisoformat(trade_date)
    return TradeRecord(
        trade_id=f"T{next(_ids)}" if trade_id is None else trade_id,
        symbol=symbol,
        isin=isin,
        trade_date=trade_date,
        exchange=exchange,
        trade_type=TradeType(trade_type),
        quantity=quantity,
        price=price,
    )


def buy(symbol="RELIANCE", trade_date="2024-01-10", quantity=10, price=100.0, **kwargs):
    return make_trade(symbol, trade_date, "buy", quantity, price, **kwargs)


def sell(symbol="RELIANCE", trade_date="2024-03-01", quantity=10, price=100.0, **kwargs):
    return make_trade(symbol, trade_date, "sell", quantity, price, **kwargs)


@pytest.fixture
def as_of():
    return AS_OF


@pytest.fixture
def reliance_trades():
    """Two buys and a partial sell: 50 @ 2400, 50 @ 2600, sell 30 @ 2700."""
    return [
        buy("RELIANCE", "2024-01-10", 50, 2400.0, trade_id="R1"),
        buy("RELIANCE", "2024-02-15", 50, 2600.0, trade_id="R2"),
        sell("RELIANCE", "2024-03-01", 30, 2700.0, trade_id="R3"),
    ]
