"""
pagekit – offset and keyset pagination for list endpoints.

Import path convention::

    from pagekit.kernel.errors import InvalidCursorError
    from pagekit.application.pagination import CursorParams, HmacCursorSigner
    from pagekit.application.search import SearchEngine, SearchOptions
    from pagekit.adapters.sqlalchemy import SqlAlchemySource
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
