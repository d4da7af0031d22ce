"""Application layer – pagination primitives and the search engine."""
