#!/usr/bin/env python
# main.py
"""
CLI entry point for tax-loss harvesting analysis.

Usage:
    python main.py tradebook-2023.csv tradebook-2024.csv \
                   [--as-of 2025-01-31] [--no-prices] [--export holdings.csv]

Several tradebooks may be given; overlapping exports are deduplicated by
trade id, so uploading each financial year's export is enough for correct
long-term classification.
"""

import argparse
import datetime
import logging
import sys

from config import AnalysisConfig
from data.market_data import PriceFetchError, QuoteFetcher
from data.merger import merge_tradebooks
from data.tradebook import load_tradebook
from portfolio.analysis import analyze_portfolio
from reporting.export import export_filename, export_holdings_csv
from reporting.holdings_report import print_analysis
from tax.tax_harvesting import TaxHarvestingEngine

logger = logging.getLogger("main")


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Holdings, realized gains and tax-loss harvesting opportunities from tradebooks"
    )
    parser.add_argument("tradebooks", nargs="+", help="Tradebook CSV file(s)")
    parser.add_argument("--as-of",     type=datetime.date.fromisoformat, default=None,
                        help="Evaluation date YYYY-MM-DD (default: today)")
    parser.add_argument("--no-prices", action="store_true", help="Skip fetching current prices")
    parser.add_argument("--export",    type=str, nargs="?", const="", default=None,
                        help="Write holdings CSV (default name if no path given)")
    parser.add_argument("--min-loss",  type=float, default=0.0,
                        help="Minimum unrealized loss to list as an opportunity")
    parser.add_argument("--log-level", type=str, default="WARNING", help="Logging level")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")

    config = AnalysisConfig()
    config.harvest.min_loss_threshold = args.min_loss

    files = [load_tradebook(path, config.tradebook) for path in args.tradebooks]
    for f in files:
        print(f"  {f.name}: {f.trade_count} trades ({f.fy_range})")
    trades = merge_tradebooks([f.trades for f in files])
    if not trades:
        print("Error: no trades found. Please supply valid tradebook CSV files.", file=sys.stderr)
        return 1

    analysis = analyze_portfolio(trades, as_of=args.as_of, config=config)
    if not analysis.holdings:
        print("No current holdings found. All positions may have been closed.")

    if analysis.holdings and not args.no_prices:
        fetcher = QuoteFetcher(config.price_feed)
        try:
            quotes = fetcher.fetch(
                [h.symbol for h in analysis.holdings],
                exchanges={h.symbol: h.exchange for h in analysis.holdings},
            )
        except PriceFetchError as exc:
            print(f"Price fetch failed: {exc}", file=sys.stderr)
        else:
            analysis = analysis.with_prices(quotes, config)

    harvester = TaxHarvestingEngine(config.harvest, config.holding_period)
    print_analysis(analysis, harvester)

    if args.export is not None:
        path = args.export or export_filename(args.as_of)
        if export_holdings_csv(analysis.holdings, path):
            print(f"\nHoldings written to {path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
