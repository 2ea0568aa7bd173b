"""Core Layer — pure ledger logic, no IO, no async, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - All functions are pure; time and randomness are passed in or isolated in new_id()

Design Decisions:
    - Functional core separated from imperative shell: the controller orchestrates
      store IO around these functions
"""
