"""
Centralized error handlers for FastAPI.

Maps domain-specific errors to HTTP responses.
No stack traces are exposed to clients; internal detail for server
errors is only included when running in development.
All error responses use the ErrorResponse schema.
"""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.domain.accounts.errors import (
    AccountAccessDeniedError,
    AccountDomainError,
    AccountNotFoundError,
    AccountValidationError,
    AuthenticationError,
    DuplicateAccountError,
    IdentifierExhaustedError,
    PersistenceError,
    RegistrationIntegrityError,
)

logger = logging.getLogger(__name__)

HTTP_400 = 400
HTTP_401 = 401
HTTP_403 = 403
HTTP_404 = 404
HTTP_409 = 409
HTTP_500 = 500


def _error_response(status_code: int, error: str, detail: Any = None) -> JSONResponse:
    """Build a consistent JSON error response."""
    body: dict[str, Any] = {"error": error}
    if detail:
        body["detail"] = detail
    return JSONResponse(status_code=status_code, content=body)


def _field_errors(exc: RequestValidationError) -> list[dict[str, str]]:
    """Flatten Pydantic errors to ``{field, message}`` pairs."""
    errors = []
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", ()) if part != "body"]
        errors.append({"field": ".".join(location), "message": error.get("msg", "")})
    return errors


def register_error_handlers(app: FastAPI, expose_internal: bool = False) -> None:
    """Register all domain error handlers on the FastAPI application.

    Args:
        app: The FastAPI application instance.
        expose_internal: Include the internal reason in 500 responses.
            Only enabled in development.
    """

    def _server_error(error: str, exc: Exception) -> JSONResponse:
        detail = str(exc) if expose_internal else None
        return _error_response(HTTP_500, error, detail)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(
        _request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Handle malformed request bodies and parameters."""
        errors = _field_errors(exc)
        logger.warning("Request validation failed on %d field(s).", len(errors))
        return _error_response(HTTP_400, "Validation failed", errors)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http(
        _request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        """Handle unknown routes and other framework-level HTTP errors."""
        if exc.status_code == HTTP_404:
            return _error_response(HTTP_404, "Route not found")
        return _error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(AccountValidationError)
    async def handle_account_validation(
        _request: Request, exc: AccountValidationError
    ) -> JSONResponse:
        """Handle registration and profile rule violations."""
        logger.warning("Validation error: %s", exc.message)
        return _error_response(HTTP_400, exc.message)

    @app.exception_handler(DuplicateAccountError)
    async def handle_duplicate(
        _request: Request, exc: DuplicateAccountError
    ) -> JSONResponse:
        """Handle email or phone already registered."""
        logger.warning("Duplicate account: %s", exc.message)
        return _error_response(HTTP_409, exc.message)

    @app.exception_handler(AccountNotFoundError)
    async def handle_account_not_found(
        _request: Request, exc: AccountNotFoundError
    ) -> JSONResponse:
        """Handle missing account errors."""
        logger.warning("Account not found: %s", exc.acc_id)
        return _error_response(HTTP_404, "Account not found")

    @app.exception_handler(AuthenticationError)
    async def handle_authentication(
        _request: Request, exc: AuthenticationError
    ) -> JSONResponse:
        """Handle failed logins and rejected tokens."""
        logger.info("Authentication failed: %s", type(exc).__name__)
        return _error_response(HTTP_401, exc.message)

    @app.exception_handler(AccountAccessDeniedError)
    async def handle_access_denied(
        _request: Request, exc: AccountAccessDeniedError
    ) -> JSONResponse:
        """Handle a token used against another account."""
        logger.warning("Access denied for account %s", exc.acc_id)
        return _error_response(HTTP_403, "Access denied")

    @app.exception_handler(IdentifierExhaustedError)
    async def handle_identifier_exhausted(
        _request: Request, exc: IdentifierExhaustedError
    ) -> JSONResponse:
        """Handle identifier generation running out of attempts."""
        logger.error("Identifier generation failed: %s", exc.message)
        return _server_error("Registration failed", exc)

    @app.exception_handler(RegistrationIntegrityError)
    async def handle_registration_integrity(
        _request: Request, exc: RegistrationIntegrityError
    ) -> JSONResponse:
        """Handle a row that could not be read back during registration."""
        logger.error("Registration integrity failure: %s", exc.reason)
        return _server_error("Registration failed", exc)

    @app.exception_handler(PersistenceError)
    async def handle_persistence(
        _request: Request, exc: PersistenceError
    ) -> JSONResponse:
        """Handle database connectivity and statement failures."""
        logger.error("Persistence error: %s", exc.reason)
        return _server_error("Database error", exc)

    @app.exception_handler(AccountDomainError)
    async def handle_account_domain(
        _request: Request, exc: AccountDomainError
    ) -> JSONResponse:
        """Catch-all for unhandled accounts domain errors."""
        logger.error("Unhandled accounts domain error: %s", exc.message)
        return _server_error("Internal server error", exc)

    @app.exception_handler(Exception)
    async def handle_unexpected(
        _request: Request, exc: Exception
    ) -> JSONResponse:
        """Catch-all for unexpected errors. Never exposes a stack trace."""
        logger.exception("Unexpected error: %s", type(exc).__name__)
        return _server_error("Internal server error", exc)
