"""Infrastructure Layer — database sessions, transactions, logging, outbound HTTP.

Invariants:
    - Only this layer talks to drivers and remote services
    - Every failure is mapped to a core/errors.py type before leaving the layer
"""
