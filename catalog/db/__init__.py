"""Database Package - declarative Base for the ORM models.

Invariants:
    - Engine and sessions live in infrastructure/database.py; this package
      only owns table metadata
"""
