# beautyshelf/api/routes/auth.py
from typing import Optional

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel

from beautyshelf.api.deps import CurrentUser, get_backend, get_current_user
from beautyshelf.db.factory import Backend

router = APIRouter(prefix="/api/auth", tags=["auth"])


class UserOut(BaseModel):
    id: str
    email: Optional[str] = None


@router.get("/me", response_model=UserOut)
def me(user: CurrentUser = Depends(get_current_user)):
    return UserOut(id=user.id, email=user.email)


@router.post("/logout")
def logout(response: Response, user: CurrentUser = Depends(get_current_user),
           backend: Backend = Depends(get_backend)):
    backend.sign_out(user.access_token)
    response.delete_cookie("access_token")
    return {"ok": True}
