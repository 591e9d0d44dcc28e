from __future__ import annotations

import logging
from typing import Iterable, Optional

from models.trade import TradeRecord

logger = logging.getLogger(__name__)


def merge_tradebooks(
    trade_lists: Optional[Iterable[Optional[Iterable[TradeRecord]]]],
) -> list[TradeRecord]:
    """
    Combine trades from several tradebook exports into one dated stream.

    Brokers cap a tradebook export at one financial year, so long-term
    classification needs several exports, and those often overlap. The
    first record seen for a trade_id wins (lists left to right, rows top
    to bottom); later copies are dropped even if their fields differ.
    The result is sorted by trade date. Same-day trades keep the order in
    which they were first seen.
    """
    unique: dict[str, TradeRecord] = {}
    duplicates = 0

    for trades in trade_lists or []:
        for trade in trades or []:
            if trade.trade_id in unique:
                duplicates += 1
                continue
            unique[trade.trade_id] = trade

    if duplicates:
        logger.debug("Dropped %d duplicate trade(s) while merging", duplicates)

    return sorted(unique.values(), key=lambda t: t.sort_key)
