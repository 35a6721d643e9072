"""
System handlers - health check and API root
"""

from models.responses import HealthResponse, WelcomeResponse

from . import api_handler

API_VERSION = "0.1.0"


@api_handler(method="GET", path="/health", prefix="", tags=["system"])
def health_check() -> HealthResponse:
    """Report that the API process is up"""
    return HealthResponse(
        status="healthy",
        message="GoTasker API is running",
        version=API_VERSION,
    )


@api_handler(method="GET", path="/", prefix="", tags=["system"])
def welcome() -> WelcomeResponse:
    """API root"""
    return WelcomeResponse(
        message="Welcome to GoTasker API! Visit /health for health check",
        docs="API documentation is available at /docs",
    )
