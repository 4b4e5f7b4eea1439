from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse

from db.models import User
from routers.deps import render, get_current_user

router = APIRouter()


@router.get("/crop-recommender", response_class=HTMLResponse)
async def crop_recommender(request: Request, user: Optional[User] = Depends(get_current_user)):
    return render(request, "crop-recommender.html", {"user": user})


@router.get("/health")
async def health():
    return {"status": "ok"}
