"""Ingestion helpers.

Everything that turns raw external input (HTTP bodies, document fields,
user-typed values) into typed zipfence values lives here.
"""
