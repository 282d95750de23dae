"""
Mamacita API backend.

A FastAPI service for pregnancy tracking, community, classes and events,
backed by SQLAlchemy and S3-compatible media storage.
"""
