"""Infrastructure Layer — storage backends, database sessions, logging.

Invariants:
    - Storage backends satisfy core.repository_protocols.TransactionStorage
    - Database failures are mapped to DatabaseError before leaving this package
"""
