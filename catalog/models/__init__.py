"""ORM Models - SQLAlchemy declarative models for the catalog.

Invariants:
    - All models inherit from Base (db/base.py)

Design Decisions:
    - One file per entity; all imported here so Base.metadata is complete
      before create_all or alembic autogenerate runs
"""

from catalog.models.product import Product  # noqa: F401
