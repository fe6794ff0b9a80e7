"""Services Layer - creation orchestrator, validator and SQL repository.

Invariants:
    - Services await storage; the rules they apply live in core/
    - Collaborators are passed in (repository, cache, telemetry, clock)

Design Decisions:
    - One file per concern; routes build the handler per request
"""
