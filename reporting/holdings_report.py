# reporting/holdings_report.py

"""
Prints the human-readable PORTFOLIO ANALYSIS block to stdout.
"""

from tax.holding_period import Classification
from tax.tax_harvesting import TaxHarvestingEngine, filter_by_classification


def print_analysis(analysis, harvester=None) -> None:
    """Print holdings, realized gains and harvesting opportunities for a PortfolioAnalysis."""
    harvester = harvester or TaxHarvestingEngine()
    holdings = analysis.holdings
    gains = analysis.realized_gains
    short_term = filter_by_classification(holdings, Classification.SHORT_TERM)
    long_term = filter_by_classification(holdings, Classification.LONG_TERM)

    print(f"\n{'='*64}")
    print(f"  PORTFOLIO ANALYSIS")
    print(f"{'='*64}")
    print(f"  Holdings:         {len(holdings):>12}   (ST {len(short_term)}, LT {len(long_term)})")
    print(f"\n  Realized gains (current FY):")
    print(f"    STCG:           ₹{gains.stcg:>14,.2f}")
    print(f"    STCL:           ₹{gains.stcl:>14,.2f}")
    print(f"    LTCG:           ₹{gains.ltcg:>14,.2f}")
    print(f"    LTCL:           ₹{gains.ltcl:>14,.2f}")
    print(f"    Net short-term: ₹{gains.net_short_term:>+14,.2f}")
    print(f"    Net long-term:  ₹{gains.net_long_term:>+14,.2f}")

    print(f"\n  Open positions:")
    for h in holdings:
        line = (
            f"    {h.symbol:<12} {h.exchange:<4} {h.total_quantity:>10.2f} @ "
            f"₹{h.avg_purchase_price:>10,.2f}  {h.classification.short_label}"
        )
        if h.is_priced:
            line += f"   P&L ₹{h.pnl:>+12,.2f} ({h.pnl_percent:>+6.1f}%)"
        print(line)

    if any(h.is_priced for h in holdings):
        st_ops = harvester.short_term_opportunities(holdings)
        lt_ops = harvester.long_term_opportunities(holdings)
        st_loss, lt_loss = harvester.total_harvestable_loss(holdings)
        print(f"\n  Harvesting opportunities:")
        print(f"    Short-term:     {len(st_ops):>12}   loss ₹{st_loss:>12,.2f}")
        for h in st_ops:
            print(f"      {h.symbol:<12} {h.pricing.short_term.quantity:>10.2f} sh   ₹{h.pricing.short_term.pnl:>+12,.2f}")
        print(f"    Long-term:      {len(lt_ops):>12}   loss ₹{lt_loss:>12,.2f}")
        for h in lt_ops:
            print(f"      {h.symbol:<12} {h.pricing.long_term.quantity:>10.2f} sh   ₹{h.pricing.long_term.pnl:>+12,.2f}")

    if analysis.warnings:
        print(f"\n  Warnings:")
        for w in analysis.warnings:
            print(
                f"    {w.symbol}:{w.exchange} sold {w.requested_quantity:g} on {w.sell_date}, "
                f"{w.unmatched_quantity:g} unmatched (missing earlier buys?)"
            )
    print(f"{'='*64}")
