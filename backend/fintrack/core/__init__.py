"""Functional Core — domain types, errors, pure validation and filter parsing.

Invariants:
    - No IO in this package; storage is reached only through repository_protocols
"""
