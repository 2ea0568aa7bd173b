"""API Schemas — Pydantic request/response models for the HTTP surface."""
