"""Schemas — pydantic parameter models passed into service operations.

Invariants:
    - Field-level validation only; cross-entity rules live in services/
"""
