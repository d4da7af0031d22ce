"""SQLAlchemy adapter – async session factory and keyset-capable queryable source."""
from pagekit.adapters.sqlalchemy.session import SqlAlchemySessionFactory
from pagekit.adapters.sqlalchemy.source import SqlAlchemySource, escape_like

__all__ = [
    "SqlAlchemySessionFactory",
    "SqlAlchemySource",
    "escape_like",
]
