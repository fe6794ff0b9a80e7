"""Infrastructure Layer - database access, logging/telemetry and caching.

Invariants:
    - Infrastructure never imports from services/ or api/
    - Implements the Protocols declared in core/repository_protocols.py
"""
