from sqlalchemy import Column, Integer, String, Text, DateTime, Float, ForeignKey, func
from sqlalchemy.orm import relationship
from .database import Base


class User(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(100), unique=True, nullable=False, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(Text, nullable=False)

    # Profile fields, empty at registration
    phone = Column(String(30), nullable=True)
    farm_area = Column(Float, nullable=True)
    pincode = Column(String(20), nullable=True)

    created_at = Column(DateTime, nullable=False, server_default=func.now())

    crop_history = relationship(
        "CropHistoryEntry",
        back_populates="user",
        order_by="CropHistoryEntry.position",
        lazy="selectin",
    )

    def __repr__(self):
        return f"<User(username='{self.username}', email='{self.email}')>"


class CropHistoryEntry(Base):
    __tablename__ = "crop_history"
    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    position = Column(Integer, nullable=False)
    season = Column(String(50), nullable=True)
    crop = Column(String(100), nullable=False)
    created_at = Column(DateTime, nullable=False, server_default=func.now())

    user = relationship("User", back_populates="crop_history")


class UserSession(Base):
    __tablename__ = "user_sessions"
    token_id = Column(String(64), primary_key=True)
    username = Column(String(100), ForeignKey("users.username"), nullable=False, index=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    expires_at = Column(DateTime, nullable=False)
