"""Finance Tracker Package — personal income/expense tracking over HTTP.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
"""
