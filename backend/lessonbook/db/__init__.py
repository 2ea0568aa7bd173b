"""Database — declarative Base for the storage_slots model.

Engine and sessions live in infrastructure/database.py and are created in the
FastAPI lifespan; nothing here opens a connection.
"""
