"""
HTTP Service

A thin JSON layer over the orchestrator. Every /api route except the
auth endpoints requires a live session cookie.

    POST   /api/auth/login           {password} -> {success, token} + cookie
    POST   /api/auth/logout          clears the session and cookie
    GET    /api/transactions         list
    POST   /api/transactions         append a draft, returns the new list
    DELETE /api/transactions/{id}    remove, returns the new list
    GET    /api/summary?period=      scalar summary
    GET    /api/daily_balance        ?year=&month=
    GET    /api/monthly_balance      ?year=
    GET    /api/weekly_balance
    GET    /health

Errors are returned as {"error": message}, request validation failures
included (422). Store failures become a generic 500 so backend
details never reach the client.
"""

from typing import Optional

import structlog
from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from moneybook import __version__
from moneybook.auth import InvalidCredentialError, RateLimitedError
from moneybook.models.reports import (
    DailyBalance,
    MonthlyBalance,
    PeriodSummary,
    WeekdayBalance,
)
from moneybook.models.transaction import Transaction, TransactionDraft
from moneybook.orchestrator import AppComponents, create_app_components
from moneybook.services.storage import StorageError


logger = structlog.get_logger(__name__)


# --- Schemas ---
class LoginRequest(BaseModel):
    password: str


class LoginResponse(BaseModel):
    success: bool
    token: str


class SuccessResponse(BaseModel):
    success: bool = True


# --- Dependencies ---
def get_components(request: Request) -> AppComponents:
    return request.app.state.components


def _session_token(request: Request, components: AppComponents) -> Optional[str]:
    return request.cookies.get(components.auth_settings.cookie_name)


async def get_current_user_id(
    request: Request,
    components: AppComponents = Depends(get_components),
) -> str:
    session = await components.authenticator.get_session(
        _session_token(request, components)
    )
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
        )
    return session.user_id


def create_app(components: Optional[AppComponents] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        components: Pre-built components (tests). Created from settings
                    when omitted.
    """
    components = components or create_app_components()

    app = FastAPI(title="Moneybook", version=__version__)
    app.state.components = components

    # --- Error handlers ---
    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        problems = []
        for error in exc.errors():
            location = ".".join(str(part) for part in error["loc"] if part != "body")
            problems.append(f"{location}: {error['msg']}" if location else error["msg"])
        return JSONResponse(
            status_code=422,
            content={"error": "; ".join(problems) or "Invalid request"},
        )

    @app.exception_handler(StorageError)
    async def storage_error_handler(request: Request, exc: StorageError):
        logger.error(
            "store_error",
            path=request.url.path,
            method=request.method,
            error=str(exc),
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Internal server error"},
        )

    # --- Auth routes ---
    @app.post("/api/auth/login", response_model=LoginResponse)
    async def login(
        body: LoginRequest,
        request: Request,
        components: AppComponents = Depends(get_components),
    ):
        client = request.client.host if request.client else None
        try:
            token = await components.authenticator.login(body.password, client=client)
        except RateLimitedError as e:
            return JSONResponse(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                content={"error": str(e)},
                headers={"Retry-After": str(e.retry_after_seconds)},
            )
        except InvalidCredentialError:
            return JSONResponse(
                status_code=status.HTTP_401_UNAUTHORIZED,
                content={"error": "Incorrect password"},
            )

        auth_settings = components.auth_settings
        response = JSONResponse(content={"success": True, "token": token})
        response.set_cookie(
            key=auth_settings.cookie_name,
            value=token,
            max_age=components.authenticator.ttl_seconds,
            path="/",
            httponly=True,
            samesite="strict",
            secure=auth_settings.cookie_secure,
        )
        return response

    @app.post("/api/auth/logout", response_model=SuccessResponse)
    async def logout(
        request: Request,
        components: AppComponents = Depends(get_components),
    ):
        await components.authenticator.logout(_session_token(request, components))

        auth_settings = components.auth_settings
        response = JSONResponse(content={"success": True})
        response.delete_cookie(
            key=auth_settings.cookie_name,
            path="/",
            httponly=True,
            samesite="strict",
            secure=auth_settings.cookie_secure,
        )
        return response

    # --- Transaction routes ---
    @app.get("/api/transactions", response_model=list[Transaction])
    async def read_transactions(
        user_id: str = Depends(get_current_user_id),
        components: AppComponents = Depends(get_components),
    ):
        return await components.repository.list_transactions(user_id)

    @app.post(
        "/api/transactions",
        response_model=list[Transaction],
        status_code=status.HTTP_201_CREATED,
    )
    async def create_transaction(
        draft: TransactionDraft,
        user_id: str = Depends(get_current_user_id),
        components: AppComponents = Depends(get_components),
    ):
        return await components.repository.append(user_id, draft)

    @app.delete("/api/transactions/{transaction_id}", response_model=list[Transaction])
    async def delete_transaction(
        transaction_id: str,
        user_id: str = Depends(get_current_user_id),
        components: AppComponents = Depends(get_components),
    ):
        return await components.repository.remove(user_id, transaction_id)

    # --- Report routes ---
    @app.get("/api/summary", response_model=PeriodSummary)
    async def read_summary(
        period: str = "daily",
        user_id: str = Depends(get_current_user_id),
        components: AppComponents = Depends(get_components),
    ):
        return await components.reports.summary(user_id, period)

    @app.get("/api/daily_balance", response_model=list[DailyBalance])
    async def read_daily_balance(
        year: Optional[int] = None,
        month: Optional[int] = None,
        user_id: str = Depends(get_current_user_id),
        components: AppComponents = Depends(get_components),
    ):
        return await components.reports.daily(user_id, year=year, month=month)

    @app.get("/api/monthly_balance", response_model=list[MonthlyBalance])
    async def read_monthly_balance(
        year: Optional[int] = None,
        user_id: str = Depends(get_current_user_id),
        components: AppComponents = Depends(get_components),
    ):
        return await components.reports.monthly(user_id, year=year)

    @app.get("/api/weekly_balance", response_model=list[WeekdayBalance])
    async def read_weekly_balance(
        user_id: str = Depends(get_current_user_id),
        components: AppComponents = Depends(get_components),
    ):
        return await components.reports.weekly(user_id)

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return app
