from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class HoldingPeriodConfig:
    # Lots held for this many calendar days or fewer are short-term.
    long_term_threshold_days: int = 365


@dataclass
class FiscalYearConfig:
    # Indian financial year: April 1 to March 31.
    start_month: int = 4
    start_day: int = 1


@dataclass
class TradebookConfig:
    required_columns: list[str] = field(default_factory=lambda: [
        "symbol",
        "isin",
        "trade_date",
        "exchange",
        "segment",
        "trade_type",
        "quantity",
        "price",
        "trade_id",
    ])
    segment: str = "EQ"                 # equities only; FO / CD / COM rows are dropped
    default_exchange: str = "NSE"
    date_formats: list[str] = field(default_factory=lambda: [
        "%Y-%m-%d",
        "%d-%m-%Y",
        "%d/%m/%Y",
    ])


@dataclass
class PriceFeedConfig:
    batch_size: int = 10                # symbols per batch; batches run in parallel
    max_workers: int = 4
    request_timeout: float = 30.0       # seconds to wait for one batch
    max_retries: int = 2
    initial_retry_delay: float = 0.5    # seconds, doubled on every retry
    exchange_suffixes: dict[str, str] = field(default_factory=lambda: {
        "NSE": ".NS",
        "BSE": ".BO",
    })
    # Tried in order when the exchange-specific suffix returns nothing
    fallback_suffixes: list[str] = field(default_factory=lambda: [".NS", ".BO"])


@dataclass
class HarvestConfig:
    min_loss_threshold: float = 0.0     # minimum unrealized loss (₹) worth listing


@dataclass
class AnalysisConfig:
    holding_period: HoldingPeriodConfig = field(default_factory=HoldingPeriodConfig)
    fiscal_year: FiscalYearConfig = field(default_factory=FiscalYearConfig)
    tradebook: TradebookConfig = field(default_factory=TradebookConfig)
    price_feed: PriceFeedConfig = field(default_factory=PriceFeedConfig)
    harvest: HarvestConfig = field(default_factory=HarvestConfig)
