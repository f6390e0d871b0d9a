"""Route Modules — one file per resource/concern.

Invariants:
    - Each module defines its own APIRouter with prefix and tags
    - Field rules and filter parsing live in core/; routes only sequence the calls
"""
