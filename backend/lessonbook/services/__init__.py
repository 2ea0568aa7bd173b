"""Services Layer — the imperative shell around the pure core.

Invariants:
    - Services own mutable state (ledger, session tokens); core stays pure
    - Store IO happens here, never in core/ or api/

Design Decisions:
    - One controller for the ledger, one for the access gate: the gate never
      touches ledger collections
"""
