"""
Public Things API Module - FastAPI Server

Provides REST API endpoints for:
- Single thing lookup with canonical redirects
- Batch thing lookup
- Health, good-to-go and build info
"""

from .server import create_app, ThingsAPIServer

__all__ = ["create_app", "ThingsAPIServer"]
