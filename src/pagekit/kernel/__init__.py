"""Kernel – error hierarchy and security primitives shared by every layer."""
