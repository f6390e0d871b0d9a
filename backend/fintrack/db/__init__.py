"""Database Infrastructure — SQLAlchemy declarative Base for the ORM models.

Invariants:
    - Used only by the database storage backend; MemStorage never touches it
"""
