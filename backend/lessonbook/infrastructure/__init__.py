"""Infrastructure Layer — IO adapters: database sessions, durable slots, logging, encoding.

Invariants:
    - Implements the protocols declared in core/repository_protocols.py
    - Maps library exceptions to core/errors.py types at this boundary
"""
