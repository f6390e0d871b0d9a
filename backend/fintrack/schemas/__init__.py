"""Pydantic Schemas — request/response shapes for API endpoints.

Invariants:
    - Wire format is camelCase; Python attributes are snake_case
    - Separate from models: schemas are API contracts, models are persistence
"""
