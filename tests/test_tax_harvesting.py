import datetime
import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest

from config import HarvestConfig
from conftest import AS_OF, buy
from portfolio.analysis import analyze_portfolio
from portfolio.ledger import LotLedger
from portfolio.overlay import apply_prices
from tax.holding_period import Classification
from tax.tax_harvesting import TaxHarvestingEngine, filter_by_classification


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _priced(trades, prices):
    holdings = LotLedger(as_of=AS_OF).process(trades).holdings
    return apply_prices(holdings, prices, as_of=AS_OF)


def _portfolio():
    """
    ST_LOSS  - short-term lot under water
    LT_LOSS  - long-term lot under water
    BOTH     - long-term lot and short-term lot, both under water
    MIXED    - long-term lot at a gain, short-term lot under water
    WINNER   - everything at a gain
    """
    trades = [
        buy("ST_LOSS", "2024-02-01", 10, 100.0),
        buy("LT_LOSS", "2022-02-01", 10, 100.0),
        buy("BOTH", "2022-02-01", 10, 100.0),
        buy("BOTH", "2024-02-01", 10, 120.0),
        buy("MIXED", "2022-02-01", 10, 50.0),
        buy("MIXED", "2024-02-01", 10, 150.0),
        buy("WINNER", "2024-02-01", 10, 10.0),
    ]
    prices = {"ST_LOSS": 80.0, "LT_LOSS": 70.0, "BOTH": 90.0, "MIXED": 100.0, "WINNER": 20.0}
    return _priced(trades, prices)


def _symbols(holdings):
    return sorted(h.symbol for h in holdings)


# ---------------------------------------------------------------------------
# Opportunity selection
# ---------------------------------------------------------------------------

def test_short_term_opportunities():
    engine = TaxHarvestingEngine()
    assert _symbols(engine.short_term_opportunities(_portfolio())) == ["BOTH", "MIXED", "ST_LOSS"]


def test_long_term_opportunities():
    engine = TaxHarvestingEngine()
    assert _symbols(engine.long_term_opportunities(_portfolio())) == ["BOTH", "LT_LOSS"]


def test_long_term_holding_can_be_short_term_opportunity():
    engine = TaxHarvestingEngine()
    mixed = next(h for h in _portfolio() if h.symbol == "MIXED")
    assert mixed.classification is Classification.LONG_TERM
    assert mixed.pnl == pytest.approx(0.0)
    assert engine.short_term_opportunities([mixed]) == [mixed]
    assert engine.long_term_opportunities([mixed]) == []


def test_unpriced_holdings_never_qualify():
    holdings = LotLedger(as_of=AS_OF).process([buy("A", "2024-01-01")]).holdings
    engine = TaxHarvestingEngine()
    assert engine.short_term_opportunities(holdings) == []
    assert engine.long_term_opportunities(holdings) == []


def test_min_loss_threshold():
    engine = TaxHarvestingEngine(HarvestConfig(min_loss_threshold=250.0))
    # ST_LOSS: 200, BOTH ST: 300, MIXED ST: 500
    assert _symbols(engine.short_term_opportunities(_portfolio())) == ["BOTH", "MIXED"]


def test_total_harvestable_loss():
    st, lt = TaxHarvestingEngine().total_harvestable_loss(_portfolio())
    assert st == pytest.approx(200.0 + 300.0 + 500.0)
    assert lt == pytest.approx(300.0 + 100.0)


# ---------------------------------------------------------------------------
# Sell orders
# ---------------------------------------------------------------------------

def test_sell_orders_per_losing_lot_of_requested_term():
    both = next(h for h in _portfolio() if h.symbol == "BOTH")
    engine = TaxHarvestingEngine()

    (st_order,) = engine.sell_orders(both, Classification.SHORT_TERM, as_of=AS_OF)
    assert st_order.quantity == 10
    assert st_order.purchase_price == 120.0
    assert st_order.purchase_date == datetime.date(2024, 2, 1)
    assert st_order.current_price == 90.0
    assert st_order.expected_loss == pytest.approx(300.0)

    (lt_order,) = engine.sell_orders(both, Classification.LONG_TERM, as_of=AS_OF)
    assert lt_order.purchase_price == 100.0
    assert lt_order.expected_loss == pytest.approx(100.0)


def test_sell_orders_skip_lots_at_gain():
    mixed = next(h for h in _portfolio() if h.symbol == "MIXED")
    assert TaxHarvestingEngine().sell_orders(mixed, Classification.LONG_TERM, as_of=AS_OF) == []


def test_sell_orders_for_unpriced_holding():
    (h,) = LotLedger(as_of=AS_OF).process([buy("A", "2024-01-01")]).holdings
    assert TaxHarvestingEngine().sell_orders(h, Classification.SHORT_TERM, as_of=AS_OF) == []


# ---------------------------------------------------------------------------
# Whole-holding views
# ---------------------------------------------------------------------------

def test_filter_by_classification():
    holdings = _portfolio()
    short = filter_by_classification(holdings, Classification.SHORT_TERM)
    long_ = filter_by_classification(holdings, Classification.LONG_TERM)
    assert _symbols(short) == ["ST_LOSS", "WINNER"]
    assert _symbols(long_) == ["BOTH", "LT_LOSS", "MIXED"]


# ---------------------------------------------------------------------------
# Sell orders agree with the priced split
# ---------------------------------------------------------------------------

def test_sell_orders_use_pricing_date_by_default():
    analysis = analyze_portfolio([buy("INFY", "2024-01-10", 10, 1500.0)], as_of=AS_OF)
    (h,) = analysis.with_prices({"INFY": 1200.0}).holdings
    engine = TaxHarvestingEngine()

    assert h.pricing.as_of == AS_OF
    assert [o.symbol for o in engine.short_term_opportunities([h])] == ["INFY"]
    (order,) = engine.sell_orders(h, Classification.SHORT_TERM)
    assert order.quantity == h.pricing.short_term.quantity
    assert order.expected_loss == pytest.approx(-h.pricing.short_term.pnl)
    assert engine.sell_orders(h, Classification.LONG_TERM) == []


def test_sell_orders_cover_same_lots_as_split():
    # one lot per term per holding, so a losing split means one losing lot
    engine = TaxHarvestingEngine()
    for h in _portfolio():
        for classification, breakdown in (
            (Classification.SHORT_TERM, h.pricing.short_term),
            (Classification.LONG_TERM, h.pricing.long_term),
        ):
            orders = engine.sell_orders(h, classification)
            expected = breakdown.quantity if breakdown.is_loss else 0.0
            assert sum(o.quantity for o in orders) == pytest.approx(expected), (h.symbol, classification)
