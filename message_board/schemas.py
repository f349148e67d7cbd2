"""
Pydantic schemas for request/response validation.

This module contains:
- Request models for incoming data validation
- Response models for API responses
"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator


# Longest message accepted, in characters
MAX_CONTENT_LENGTH = 250


# =============================================================================
# Pydantic Request Models
# =============================================================================

class LoginRequest(BaseModel):
    """
    Body of POST /api/login.

    Both fields are optional here; a missing field simply fails verification.
    """
    username: Optional[str] = Field(None, description="Account name")
    password: Optional[str] = Field(None, description="Plaintext password")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"username": "User A", "password": "Pwd&1234"}
            ]
        }
    }


class MessageCreateRequest(BaseModel):
    """
    Body of POST /api/messages.

    Validates:
    - content: present, at most 250 characters, not blank once trimmed

    The trim is only used for the blank check; content is kept as sent.
    """
    content: str = Field(
        ...,
        max_length=MAX_CONTENT_LENGTH,
        description="Message text (1-250 characters)"
    )

    @field_validator("content")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("content must not be blank")
        return v

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"content": "hello"}
            ]
        }
    }


# =============================================================================
# Pydantic Response Models
# =============================================================================

class MessageResponse(BaseModel):
    """
    A stored message as returned by the API.
    Maps database fields to API response format.
    """
    id: str = Field(..., description="Message identifier assigned on insert")
    content: str = Field(..., description="Message text, exactly as posted")
    timestamp: str = Field(..., description="Creation time (ISO-8601 UTC)")

    @field_validator("id", mode="before")
    @classmethod
    def stringify_id(cls, v) -> str:
        """Expose the database key as an opaque string."""
        return str(v)

    model_config = {
        "from_attributes": True,  # Allow creating from ORM objects
    }


class ErrorResponse(BaseModel):
    """Response model for error responses."""
    detail: str = Field(..., description="Error description")


class HealthResponse(BaseModel):
    """Response model for health check endpoints."""
    status: str = Field(..., description="Health status")
    reason: Optional[str] = Field(None, description="Reason if not ready")
