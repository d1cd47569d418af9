"""
Backend package for the field capture service.

This package provides a FastAPI application with database, object storage
and session abstractions so the capture UI can record, list and summarize
environmental observations without talking to the storage layers directly.
"""
