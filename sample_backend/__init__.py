"""
Backend package for the sample CRUD + auth service.

This package provides a FastAPI application over a single SQLite file:
posts CRUD, a demo-grade bearer-token auth flow and a few utility
endpoints used for client testing.
"""
