"""Adapters – concrete queryable sources and transport integrations."""
