from __future__ import annotations

import dataclasses
import datetime
import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Optional

from config import AnalysisConfig
from models.holding import Holding
from models.trade import TradeRecord
from portfolio.ledger import LotLedger, OversellWarning
from portfolio.overlay import apply_prices
from tax.realized_gains import RealizedGainsSummary, fiscal_year_start, summarize

logger = logging.getLogger(__name__)


@dataclass
class PortfolioAnalysis:
    holdings: list[Holding] = field(default_factory=list)
    realized_gains: RealizedGainsSummary = field(default_factory=RealizedGainsSummary)
    warnings: list[OversellWarning] = field(default_factory=list)
    as_of: Optional[datetime.date] = None

    def with_prices(
        self,
        prices: Optional[Mapping[str, Any]],
        config: Optional[AnalysisConfig] = None,
    ) -> "PortfolioAnalysis":
        """Copy of the analysis with quotes applied; safe to call repeatedly."""
        cfg = config or AnalysisConfig()
        holdings = apply_prices(
            self.holdings,
            prices,
            as_of=self.as_of,
            threshold_days=cfg.holding_period.long_term_threshold_days,
        )
        return dataclasses.replace(self, holdings=holdings)


def analyze_portfolio(
    trades: Optional[Iterable[TradeRecord]],
    as_of: Optional[datetime.date] = None,
    config: Optional[AnalysisConfig] = None,
) -> PortfolioAnalysis:
    """
    Open holdings and this financial year's realized gains from a trade history.

    ``as_of`` (default today) drives both the holding classification and
    which financial year the realized-gains summary covers.
    """
    cfg = config or AnalysisConfig()
    if not trades:
        return PortfolioAnalysis(as_of=as_of)

    result = LotLedger(as_of=as_of, config=cfg.holding_period).process(trades)
    fy_start = fiscal_year_start(as_of, cfg.fiscal_year)
    summary = summarize(result.realized_gains, fy_start)

    logger.info(
        "%d open holding(s), %d realized gain entr%s since %s",
        len(result.holdings),
        len(summary.entries),
        "y" if len(summary.entries) == 1 else "ies",
        fy_start,
    )
    return PortfolioAnalysis(
        holdings=result.holdings,
        realized_gains=summary,
        warnings=result.warnings,
        as_of=as_of,
    )
