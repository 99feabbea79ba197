"""Portfolio module: per-user ledgers, trade execution, periodic valuation
and the command interface.

Modules are imported directly (e.g. ``from portfolio.exchange import
Exchange``) so that ``financial.account`` can depend on ``portfolio.ledger``
without an import cycle.
"""
