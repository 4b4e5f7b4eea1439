import logging
from typing import Optional

from fastapi import APIRouter, Depends, Form, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import settings
from core.exceptions import FarmPortalError, UnauthenticatedError
from db.database import get_db
from db.models import User
from routers.deps import render, get_current_user, get_session_token
from schemas.users import UserCreate, UserLogin, UserRead
from services import auth as auth_service

logger = logging.getLogger(__name__)

router = APIRouter()


def _messages(error: Optional[str] = None, success: Optional[str] = None) -> dict:
    return {"error": error, "success": success}


# ----------------------------------------------------------------------------
# Registration
# ----------------------------------------------------------------------------

@router.get("/register", response_class=HTMLResponse)
async def register_form(request: Request, user: Optional[User] = Depends(get_current_user)):
    return render(request, "register.html", {"user": user, "messages": _messages()})


@router.post("/register", response_class=HTMLResponse)
async def register_user(
    request: Request,
    username: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    password: Optional[str] = Form(None),
    confirm_password: Optional[str] = Form(None),
    user: Optional[User] = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Registers a new account and sends the client to the login page.

    Validation and duplicate errors re-render the form with the message; the
    submitted passwords are never echoed back.
    """
    form = UserCreate(username=username, email=email, password=password, confirm_password=confirm_password)
    try:
        await auth_service.register(db, form)
    except FarmPortalError as e:
        return render(
            request,
            "register.html",
            {"user": user, "messages": _messages(error=e.message), "username": username, "email": email},
            status_code=e.status_code,
        )
    except Exception:
        logger.exception("Registration error")
        return render(
            request,
            "register.html",
            {"user": user, "messages": _messages(error="An error occurred during registration. Please try again.")},
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
    return RedirectResponse("/login?registrationSuccess=true", status_code=status.HTTP_303_SEE_OTHER)


# ----------------------------------------------------------------------------
# Login / logout
# ----------------------------------------------------------------------------

@router.get("/login", response_class=HTMLResponse)
async def login_form(
    request: Request,
    registrationSuccess: Optional[str] = None,
    user: Optional[User] = Depends(get_current_user),
):
    success = "Registration successful! Please log in." if registrationSuccess == "true" else None
    return render(request, "login.html", {"user": user, "messages": _messages(success=success)})


@router.post("/login", response_class=HTMLResponse)
async def login_user(
    request: Request,
    username: Optional[str] = Form(None),
    password: Optional[str] = Form(None),
    db: AsyncSession = Depends(get_db),
):
    try:
        token = await auth_service.login(db, UserLogin(username=username, password=password))
    except FarmPortalError as e:
        return render(
            request,
            "login.html",
            {"user": None, "messages": _messages(error=e.message), "username": username},
            status_code=e.status_code,
        )
    except Exception:
        logger.exception("Login error")
        return render(
            request,
            "login.html",
            {"user": None, "messages": _messages(error="An error occurred during login. Please try again.")},
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    response = RedirectResponse("/profile", status_code=status.HTTP_303_SEE_OTHER)
    response.set_cookie(
        settings.session_cookie_name,
        token,
        max_age=settings.access_token_expire_minutes * 60,
        httponly=True,
        samesite="lax",
    )
    return response


@router.post("/logout")
async def logout_user(token: Optional[str] = Depends(get_session_token), db: AsyncSession = Depends(get_db)):
    await auth_service.logout(db, token)
    response = RedirectResponse("/", status_code=status.HTTP_303_SEE_OTHER)
    response.delete_cookie(settings.session_cookie_name)
    return response


# ----------------------------------------------------------------------------
# Profile
# ----------------------------------------------------------------------------

@router.get("/profile", response_class=HTMLResponse)
async def profile(
    request: Request,
    token: Optional[str] = Depends(get_session_token),
    db: AsyncSession = Depends(get_db),
):
    try:
        user = await auth_service.require_current_user(db, token)
    except UnauthenticatedError as e:
        return render(request, "profile.html", {"user": None, "profile": None, "messages": _messages(error=e.message)})

    return render(
        request,
        "profile.html",
        {"user": user, "profile": UserRead.model_validate(user), "messages": _messages()},
    )
