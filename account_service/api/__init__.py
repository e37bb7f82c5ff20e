"""
Account Service API Application Factory
"""

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from .accounts import router as accounts_router
from .transactions import router as transactions_router
from .schemas import ErrorResponse
from ..errors import AccountServiceError
from ..storage import StorageError
from ..config import get_config
from ..logging_config import get_logger, setup_logging


def _error_body(code: str, message: str) -> dict:
    return ErrorResponse(error_code=code, error_message=message).model_dump(by_alias=True)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application"""
    app = FastAPI(
        title="Account Service API",
        description="Account balances with an auditable transaction ledger",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc"
    )

    app.include_router(accounts_router, prefix="/account", tags=["Accounts"])
    app.include_router(transactions_router, prefix="/transaction", tags=["Transactions"])

    @app.exception_handler(AccountServiceError)
    async def account_service_error_handler(request: Request, exc: AccountServiceError):
        error_code = exc.error_code
        status_code = status.HTTP_404_NOT_FOUND if error_code.is_not_found else status.HTTP_400_BAD_REQUEST
        return JSONResponse(
            status_code=status_code,
            content=_error_body(error_code.code, error_code.message)
        )

    @app.exception_handler(StorageError)
    async def storage_error_handler(request: Request, exc: StorageError):
        get_logger("account_service.api").error(
            f"Storage failure on {request.method} {request.url.path}: {exc}"
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_error_body("INTERNAL_SERVER_ERROR", "Request could not be persisted")
        )

    # Health check endpoint
    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "service": "account_service",
            "version": "1.0.0"
        }

    return app


def run_server(host: str = None, port: int = None, debug: bool = False):
    """Run the FastAPI server"""
    config = get_config()
    setup_logging(config.log_level, config.log_format)
    uvicorn.run(
        "account_service.api:create_app",
        factory=True,
        host=host or config.api_host,
        port=port or config.api_port,
        reload=debug,
        log_level=config.log_level.lower()
    )
