"""FastAPI adapter – pagination query dependency and exception mapper."""
from pagekit.adapters.fastapi.deps import FastAPIPaginationDep, error_responses, pagination_params
from pagekit.adapters.fastapi.exception_mapper import FastAPIExceptionMapper

__all__ = [
    "FastAPIExceptionMapper",
    "FastAPIPaginationDep",
    "error_responses",
    "pagination_params",
]
