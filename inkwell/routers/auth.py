"""Token-based authentication routes for API clients."""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.concurrency import run_in_threadpool

from ..backend import AuthSession, BackendClient, get_backend
from ..schemas import AuthResponse, SignInRequest, SignUpRequest

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _to_response(session: AuthSession) -> AuthResponse:
    return AuthResponse(
        access_token=session.access_token,
        user_id=session.user.id,
        email=session.user.email,
        expires_at=session.expires_at,
    )


@router.post("/sign-up", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def sign_up_endpoint(
    payload: SignUpRequest,
    backend: BackendClient = Depends(get_backend),
) -> AuthResponse:
    result = await run_in_threadpool(
        backend.auth.sign_up, email=payload.email, password=payload.password, name=payload.name
    )
    if result.error is not None or result.data is None:
        code = result.error.code if result.error else None
        status_code = status.HTTP_409_CONFLICT if code == "user_already_exists" else status.HTTP_400_BAD_REQUEST
        raise HTTPException(status_code=status_code, detail=result.error.message if result.error else "Sign up failed")
    return _to_response(result.data)


@router.post("/sign-in", response_model=AuthResponse)
async def sign_in_endpoint(
    payload: SignInRequest,
    backend: BackendClient = Depends(get_backend),
) -> AuthResponse:
    result = await run_in_threadpool(
        backend.auth.sign_in_with_password, email=payload.email, password=payload.password
    )
    if result.error is not None or result.data is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    return _to_response(result.data)


__all__ = ["router"]
