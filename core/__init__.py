"""
Core - Shared infrastructure for MeshIt

This package provides:
- TimestampedModel: UUID primary key and timestamps for every model
- BackgroundEffect: non-blocking secondary effects dispatched after commit
"""
