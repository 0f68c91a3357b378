"""
API Module - HTTP surface for a board UI.

Provides:
- Pydantic request/response schemas
- APIService business logic layer
- FastAPI application factory

The UI owns rendering, dialogs and file pickers; it calls these
endpoints with raw text or form data.
"""

from .service import APIService
from .app import create_app

__all__ = [
    "APIService",
    "create_app",
]
