"""FastAPI application entrypoint."""

from __future__ import annotations

from datetime import timedelta
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from hotel_office.adapters.auth import BcryptPasswordHasher, JwtTokenService
from hotel_office.core.config import Settings, get_settings
from hotel_office.errors import ApiError, internal_error, validation_failed
from hotel_office.repositories.memory import InMemoryStore, StoreUnavailableError
from hotel_office.routes import auth_router, collection_routers
from hotel_office.schemas.auth import Role
from hotel_office.services.credentials import CredentialService

logger = logging.getLogger(__name__)

_RULE_BY_ERROR_TYPE: dict[str, str] = {
    "missing": "required",
    "string_type": "type",
    "dict_type": "type",
    "model_attributes_type": "type",
    "json_invalid": "json",
    "extra_forbidden": "unknown_field",
}


def _error_response(exc: ApiError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.payload.model_dump(mode="json", exclude_none=True),
    )


def _validation_error(exc: RequestValidationError) -> ApiError:
    """Report the first failing field of a malformed request in the field/rule shape."""
    errors = exc.errors()
    if not errors:
        return validation_failed("body", "invalid", "Invalid request payload")
    first = errors[0]
    location = [str(part) for part in first.get("loc", ()) if part != "body"]
    field = ".".join(location) or "body"
    rule = _RULE_BY_ERROR_TYPE.get(first.get("type", ""), first.get("type", "invalid"))
    return validation_failed(field, rule, f"Invalid request payload: {field} {first.get('msg', 'is invalid')}")


def _bootstrap_admin(app: FastAPI, settings: Settings) -> None:
    service = CredentialService(app.state.store, app.state.password_hasher, app.state.token_service)
    record = service.provision(
        username=settings.bootstrap_admin_username or "",
        email=settings.bootstrap_admin_email or "",
        password=settings.bootstrap_admin_password.get_secret_value() if settings.bootstrap_admin_password else "",
        role=Role.ADMIN,
    )
    if record is None:
        logger.info("bootstrap.admin_exists")


def create_app(settings: Settings | None = None, *, store: InMemoryStore | None = None) -> FastAPI:
    """Build the application; a missing signing secret fails here, before any request is served."""
    settings = settings or get_settings()
    secret = settings.jwt_secret.get_secret_value() if settings.jwt_secret is not None else None

    app = FastAPI(title="Hotel Office API", version="1.0.0")
    app.state.settings = settings
    app.state.store = store if store is not None else InMemoryStore()
    app.state.token_service = JwtTokenService(
        secret,
        algorithm=settings.jwt_algorithm,
        ttl=timedelta(days=settings.token_ttl_days),
    )
    app.state.password_hasher = BcryptPasswordHasher(rounds=settings.bcrypt_rounds)

    @app.exception_handler(ApiError)
    async def handle_api_error(_, exc: ApiError) -> JSONResponse:
        return _error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        return _error_response(_validation_error(exc))

    @app.exception_handler(StoreUnavailableError)
    async def handle_store_unavailable(request: Request, exc: StoreUnavailableError) -> JSONResponse:
        logger.error(
            "store.unavailable method=%s path=%s error=%s",
            request.method,
            request.url.path,
            exc,
        )
        return _error_response(internal_error())

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("request.unhandled_error method=%s path=%s", request.method, request.url.path)
        return _error_response(internal_error())

    api_prefix = "/api"
    app.include_router(auth_router, prefix=api_prefix)
    for router in collection_routers:
        app.include_router(router, prefix=api_prefix)

    if settings.has_bootstrap_admin:
        _bootstrap_admin(app, settings)

    return app
