"""Endpoint modules for the external geometry and lookup services."""
