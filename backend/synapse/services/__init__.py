"""Service Layer — the business operations, one unit of work each.

Invariants:
    - Every mutating operation runs inside TransactionCoordinator.run()
    - Pure rule checks delegated to core/; services only read, decide, write
"""
