"""Sign-in, sign-out and session endpoints backed by the hosted auth provider"""

import logging
from fastapi import APIRouter, Depends, HTTPException, Request
from financeflow.api.v1.schemas import IdentitySchema, SessionResponse, SignInRequest
from financeflow.api.dependencies import get_auth_client, get_request_id
from financeflow.domain.exceptions import AuthenticationError, DataServiceError
from financeflow.infrastructure.clients.auth import AuthClient

router = APIRouter()


@router.post("/auth/sign-in", response_model=IdentitySchema)
async def sign_in(
    request_body: SignInRequest,
    request: Request,
    auth_client: AuthClient = Depends(get_auth_client),
):
    """Exchange email and password for a session held by this instance"""
    request_id = get_request_id(request)
    try:
        session = await auth_client.sign_in_with_password(request_body.email, request_body.password)
    except AuthenticationError as e:
        logging.warning(f"Sign-in rejected: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=401, detail=str(e) or "Invalid login credentials")
    except DataServiceError as e:
        logging.error(f"Auth provider error: {e}", extra={"request_id": request_id, "error_code": e.code})
        raise HTTPException(status_code=502, detail="Auth service unavailable")

    return IdentitySchema.model_validate(session.user)


@router.post("/auth/sign-out", status_code=204)
async def sign_out(request: Request, auth_client: AuthClient = Depends(get_auth_client)):
    request_id = get_request_id(request)
    try:
        await auth_client.sign_out()
    except DataServiceError as e:
        logging.error(f"Auth provider error: {e}", extra={"request_id": request_id, "error_code": e.code})
        raise HTTPException(status_code=502, detail="Auth service unavailable")


@router.get("/auth/session", response_model=SessionResponse)
async def get_session(auth_client: AuthClient = Depends(get_auth_client)):
    session = await auth_client.get_session()
    if session is None:
        return SessionResponse(authenticated=False)
    return SessionResponse(authenticated=True, user=IdentitySchema.model_validate(session.user))
