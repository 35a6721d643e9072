"""
GoTasker HTTP server

Startup is sequential: resolve configuration, open and verify the database
connection, apply migrations, then serve HTTP. Any failure before serving
is fatal and exits with status 1.
"""

import sys

import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from config import load_config
from core.db import DatabaseManager
from core.errors import StartupError, TaskNotFoundError, TaskValidationError
from core.logger import get_logger, setup_logging
from core.startup import server_address, start_database
from handlers import register_fastapi_routes
from handlers.system import API_VERSION

logger = get_logger(__name__)


def create_app(db: DatabaseManager) -> FastAPI:
    """Build the HTTP front end around an already migrated database"""
    app = FastAPI(
        title="GoTasker API",
        version=API_VERSION,
        description="Task management API",
    )
    app.state.db = db

    @app.exception_handler(TaskNotFoundError)
    async def _task_not_found(request: Request, exc: TaskNotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(TaskValidationError)
    async def _task_invalid(request: Request, exc: TaskValidationError) -> JSONResponse:
        return JSONResponse(status_code=422, content={"detail": str(exc)})

    register_fastapi_routes(app, prefix="/api/v1")
    return app


def main() -> int:
    load_dotenv()

    config = load_config()
    setup_logging(config.get("logging"))

    try:
        host, port = server_address(config)
        db = start_database(config)
    except StartupError as e:
        logger.critical(f"✗ Failed to {e.step}: {e}")
        return 1

    with db:
        app = create_app(db)

        logger.info(f"🚀 Starting GoTasker server on port {port}")
        logger.info(f"📝 Health check: http://localhost:{port}/health")
        logger.info(f"📚 API base: http://localhost:{port}/api/v1")

        uvicorn.run(app, host=host, port=port, log_config=None)

    return 0


if __name__ == "__main__":
    sys.exit(main())
