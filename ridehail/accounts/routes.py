"""
RideHail - Account Routes

One router per account kind, built from the same factory:
- POST /{kind}/register  - Create account, set session cookie
- POST /{kind}/login     - Authenticate, set session cookie
- GET  /{kind}/profile   - Current account (requires session cookie)
- POST /{kind}/logout    - Clear session cookie
"""

from typing import Callable

from fastapi import APIRouter, Depends, Request, Response, status

from ridehail.accounts.kinds import AccountKind
from ridehail.accounts.schemas import ApiResponse, LoginRequest
from ridehail.accounts.service import AccountService
from ridehail.auth.cookies import SessionCookiePolicy
from ridehail.auth.dependencies import get_cookie_policy, get_current_identity
from ridehail.auth.tokens import DecodedIdentity


def service_dependency(kind: AccountKind) -> Callable[[Request], AccountService]:
    def get_account_service(request: Request) -> AccountService:
        return request.app.state.account_services[kind.name]

    return get_account_service


def build_account_router(kind: AccountKind) -> APIRouter:
    """Create the register/login/profile/logout router for an account kind."""
    router = APIRouter(prefix=f"/{kind.name}", tags=[kind.name])
    get_service = service_dependency(kind)
    label = kind.display_name

    async def register(
        body: kind.register_schema,
        response: Response,
        service: AccountService = Depends(get_service),
        cookies: SessionCookiePolicy = Depends(get_cookie_policy),
    ):
        account, token = await service.register(body)
        cookies.attach(response, token)
        return ApiResponse(
            status=status.HTTP_201_CREATED,
            message=f"{label} created successfully",
            result={
                "account": kind.profile_schema.from_account(account).model_dump(mode="json"),
                "token": token,
            },
        )

    for path in ("/register", *kind.register_aliases):
        router.add_api_route(
            path,
            register,
            methods=["POST"],
            response_model=ApiResponse,
            status_code=status.HTTP_201_CREATED,
            summary=f"Register a new {kind.name}",
        )

    @router.post("/login", response_model=ApiResponse, summary=f"Log a {kind.name} in")
    async def login(
        body: LoginRequest,
        response: Response,
        service: AccountService = Depends(get_service),
        cookies: SessionCookiePolicy = Depends(get_cookie_policy),
    ):
        account, token = await service.login(body.email, body.password)
        cookies.attach(response, token)
        profile = kind.profile_schema.from_account(account).model_dump(mode="json")
        return ApiResponse(
            status=status.HTTP_200_OK,
            message=f"{label} logged in successfully",
            result={
                "userId": str(account.id),
                "fullname": profile["fullname"],
                "email": account.email,
                "token": token,
            },
        )

    @router.get("/profile", response_model=ApiResponse, summary=f"Current {kind.name} profile")
    async def profile(
        identity: DecodedIdentity = Depends(get_current_identity),
        service: AccountService = Depends(get_service),
    ):
        account = service.get_profile(identity)
        return ApiResponse(
            status=status.HTTP_200_OK,
            message=f"{label} details fetched successfully",
            result=kind.profile_schema.from_account(account).model_dump(mode="json"),
        )

    @router.post("/logout", response_model=ApiResponse, summary="Clear the session cookie")
    async def logout(
        response: Response,
        cookies: SessionCookiePolicy = Depends(get_cookie_policy),
    ):
        # Stateless tokens: logout only drops the client's cookie
        cookies.clear(response)
        return ApiResponse(status=status.HTTP_200_OK, message="Logout successful")

    return router
