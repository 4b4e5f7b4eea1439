from pydantic import BaseModel, ConfigDict
from datetime import datetime
from typing import Optional, List


class UserCreate(BaseModel):
    username: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    confirm_password: Optional[str] = None


class UserLogin(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None


class CropHistoryRead(BaseModel):
    season: Optional[str] = None
    crop: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class UserRead(BaseModel):
    username: str
    email: str
    phone: Optional[str] = None
    farm_area: Optional[float] = None
    pincode: Optional[str] = None
    created_at: datetime
    crop_history: List[CropHistoryRead] = []

    model_config = ConfigDict(from_attributes=True)
