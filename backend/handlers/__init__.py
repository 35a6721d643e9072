"""
Handler modules with automatic API registration

Handlers are plain functions decorated with @api_handler; register_fastapi_routes()
turns every registered handler into a FastAPI route.
"""

import inspect
from typing import (
    TYPE_CHECKING,
    Any,
    Callable,
    Dict,
    List,
    Optional,
    TypeVar,
)

from fastapi import Request

from core.db import DatabaseManager
from core.logger import get_logger

if TYPE_CHECKING:
    from fastapi import FastAPI

logger = get_logger(__name__)

F = TypeVar('F', bound=Callable[..., Any])

# Global API handler registry
_handler_registry: Dict[str, Dict[str, Any]] = {}


def api_handler(
    method: str = "POST",
    path: Optional[str] = None,
    tags: Optional[List[str]] = None,
    summary: Optional[str] = None,
    description: Optional[str] = None,
    status_code: Optional[int] = None,
    prefix: Optional[str] = None,
):
    """
    API handler decorator

    @param method - HTTP method (GET, POST, PUT, DELETE, etc.)
    @param path - Route path, defaults to /<function name>
    @param tags - API tags
    @param summary - API summary
    @param description - API description
    @param status_code - Success status code
    @param prefix - Overrides the prefix given to register_fastapi_routes
    """

    def decorator(func: F) -> F:
        # Get function information
        func_name = getattr(func, '__name__', 'unknown')
        func_module = getattr(func, '__module__', '')
        module_name = func_module.split(".")[-1] if func_module else 'unknown'
        func_doc = inspect.getdoc(func)

        # Register handler information
        _handler_registry[func_name] = {
            "func": func,
            "method": method.upper(),
            "path": path or f"/{func_name}",
            "tags": tags or [module_name],
            "module": module_name,
            "summary": summary or (func_doc.split("\n")[0] if func_doc else func_name),
            "description": description or func_doc or "",
            "status_code": status_code,
            "prefix": prefix,
        }

        # Keep original function unchanged
        return func

    return decorator


def get_registered_handlers() -> Dict[str, Dict[str, Any]]:
    """
    Get registered handler information (for debugging)

    @returns Handler registry
    """
    return _handler_registry.copy()


def get_db(request: Request) -> DatabaseManager:
    """FastAPI dependency returning the application's DatabaseManager"""
    return request.app.state.db


def register_fastapi_routes(app: "FastAPI", prefix: str = "/api/v1") -> None:
    """
    Automatically register all functions decorated with @api_handler as FastAPI routes

    @param app - FastAPI application instance
    @param prefix - Route prefix
    """
    logger.debug(
        f"Starting FastAPI route registration, {len(_handler_registry)} handlers"
    )

    for handler_name, handler_info in _handler_registry.items():
        func = handler_info["func"]
        method = handler_info["method"]
        route_prefix = handler_info["prefix"]
        full_path = f"{prefix if route_prefix is None else route_prefix}{handler_info['path']}"

        route_params: Dict[str, Any] = {
            "path": full_path,
            "tags": handler_info["tags"],
            "summary": handler_info["summary"],
            "description": handler_info["description"],
            "methods": [method],
            "name": handler_name,
        }
        if handler_info["status_code"] is not None:
            route_params["status_code"] = handler_info["status_code"]

        app.add_api_route(endpoint=func, **route_params)

        logger.debug(
            f"✓ Successfully registered route: {method} {full_path} "
            f"({handler_name} from {handler_info['module']})"
        )

    logger.debug(
        f"FastAPI route registration completed: {len(_handler_registry)} routes"
    )


# Import all handler modules to trigger decorator registration
# Note: These imports must be after all decorator definitions to avoid circular imports
# ruff: noqa: E402
from . import system, tasks

__all__ = [
    "api_handler",
    "get_db",
    "get_registered_handlers",
    "register_fastapi_routes",
    "system",
    "tasks",
]
