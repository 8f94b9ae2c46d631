"""StockLedger: inventory ledger and moving-average costing engine."""

__version__ = "1.0.0"
