# SmartBook - Cash-basis bookkeeping & financial statements for small businesses
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
SmartBook
---------

A Python-based cash-basis bookkeeping tool for a single business entity.
Users record dated cash transactions tagged with a fixed category; SmartBook
derives the three standard financial statements and a small set of health
ratios for any reporting month.

Main capabilities:
- category classification table (built-in or loaded from CSV),
- statement aggregation (profit or loss, financial position, cash flow),
- period selection (month + cumulative-to-date),
- monthly revenue / expense / net profit trend,
- health ratios (profitability, financial safety, asset efficiency),
- a SQLite transaction store with JSON / CSV backup import and export,
- a command-line interface.

SmartBook separates computation (engine, trends, ratios), configuration
(TOML), storage (SQLite) and presentation (CLI), so that the derivation
engine can be reused from scripts and notebooks.


Version: 0.2.0

Usage:
    python -m smartbook.cli --help
"""

__all__ = [
    "classification",
    "config",
    "db",
    "engine",
    "io",
    "periods",
    "ratios",
    "reporting",
    "transactions",
    "transactions_service",
    "trends",
    "views",
]

__version__ = "0.2.0"
