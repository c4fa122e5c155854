from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel
from sqlmodel import Session

from ..config import COOKIE_SECURE, SESSION_COOKIE_NAME, SESSION_EXPIRE_DAYS
from ..database import get_session
from ..dependencies import Identity, require_identity
from ..services.auth import create_session, delete_session
from ..services.spaces import authenticate_admin, authenticate_user, create_space, join_space

router = APIRouter(prefix="/api/spaces", tags=["spaces"])


class SpaceCreate(BaseModel):
    space_name: str
    admin_password: str
    confirm_password: str


class SpaceJoin(BaseModel):
    join_code: str
    username: str
    password: str
    confirm_password: str


class AdminLogin(BaseModel):
    join_code: str
    admin_password: str


class UserLogin(BaseModel):
    join_code: str
    username: str
    password: str


def set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=token,
        httponly=True,
        secure=COOKIE_SECURE,
        max_age=SESSION_EXPIRE_DAYS * 24 * 60 * 60,
        samesite="lax",
        path="/"
    )


@router.post("/create", status_code=status.HTTP_201_CREATED)
async def post_create_space(
    payload: SpaceCreate,
    db: Session = Depends(get_session)
):
    """Create a new space and hand back its join code."""
    space = create_space(db, payload.space_name, payload.admin_password, payload.confirm_password)

    return {
        "message": "Space created successfully!",
        "space_id": space.id,
        "space_name": space.space_name,
        "join_code": space.join_code
    }


@router.post("/join", status_code=status.HTTP_201_CREATED)
async def post_join_space(
    payload: SpaceJoin,
    response: Response,
    db: Session = Depends(get_session)
):
    """Register in a space with its join code and log in."""
    space, user = join_space(
        db, payload.join_code, payload.username, payload.password, payload.confirm_password
    )
    auth_session = create_session(db, space.id, user_id=user.id)
    set_session_cookie(response, auth_session.session_token)

    return {
        "message": f"Successfully joined Space: {space.space_name}",
        "user_id": user.id,
        "username": user.username,
        "space_id": space.id,
        "space_name": space.space_name,
        "isAdmin": False,
        "token": auth_session.session_token
    }


@router.post("/admin/login")
async def post_admin_login(
    payload: AdminLogin,
    response: Response,
    db: Session = Depends(get_session)
):
    space = authenticate_admin(db, payload.join_code, payload.admin_password)
    auth_session = create_session(db, space.id, is_admin=True)
    set_session_cookie(response, auth_session.session_token)

    return {
        "message": f"Admin login successful for Space: {space.space_name}",
        "space_id": space.id,
        "space_name": space.space_name,
        "isAdmin": True,
        "token": auth_session.session_token
    }


@router.post("/user/login")
async def post_user_login(
    payload: UserLogin,
    response: Response,
    db: Session = Depends(get_session)
):
    space, user = authenticate_user(db, payload.join_code, payload.username, payload.password)
    auth_session = create_session(db, space.id, user_id=user.id)
    set_session_cookie(response, auth_session.session_token)

    return {
        "message": f"Login successful for user: {user.username} in Space: {space.space_name}",
        "user_id": user.id,
        "username": user.username,
        "space_id": space.id,
        "space_name": space.space_name,
        "isAdmin": False,
        "token": auth_session.session_token
    }


@router.post("/logout")
async def post_logout(
    response: Response,
    identity: Identity = Depends(require_identity),
    db: Session = Depends(get_session)
):
    """End the current session and clear the cookie."""
    delete_session(db, identity.token)
    response.delete_cookie(key=SESSION_COOKIE_NAME, path="/")

    return {"message": "Logged out successfully"}
