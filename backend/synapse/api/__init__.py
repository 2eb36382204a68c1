"""API Layer — thin FastAPI shell: error mapping and health probes.

Invariants:
    - No business rules here; handlers call services and translate errors
"""
