"""API Layer — FastAPI routers, dependencies and global error handlers.

Invariants:
    - Routes never contain ledger rules (delegate to LedgerController / core)
"""
