"""
Response models for API handlers
Provides strongly typed response models for better type safety and auto-generation
"""

from .base import BaseModel


class HealthResponse(BaseModel):
    """Health check response"""

    status: str
    message: str
    version: str


class WelcomeResponse(BaseModel):
    """Root endpoint response"""

    message: str
    docs: str
