"""
API Schemas Package

Contains shared Pydantic models for API Layer.
"""

from sheetjobs.api.schemas.common import CamelModel, ErrorResponse

__all__ = ["CamelModel", "ErrorResponse"]
