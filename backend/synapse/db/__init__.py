"""Database Layer — declarative base and shared column types.

Invariants:
    - Engine/session lifecycle lives in infrastructure/, not here
"""
