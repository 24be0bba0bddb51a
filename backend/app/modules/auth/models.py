from datetime import datetime

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from app.db import Base

ROLE_PARENT = "parent"
ROLE_CHILD = "child"
USER_ROLES = {ROLE_PARENT, ROLE_CHILD}


class User(Base):
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("Points >= 0", name="ck_users_points_non_negative"),
        CheckConstraint("Role IN ('parent', 'child')", name="ck_users_role"),
    )

    Id = Column(Integer, primary_key=True, index=True)
    Username = Column(String(120), nullable=False, unique=True, index=True)
    PasswordHash = Column(String(255), nullable=False)
    Role = Column(String(20), nullable=False, default=ROLE_CHILD)
    Name = Column(String(120), nullable=False)
    FamilyId = Column(Integer, nullable=False, index=True)
    ParentId = Column(Integer, ForeignKey("users.Id"), index=True)
    Points = Column(Integer, nullable=False, default=0)
    ProfilePhoto = Column(String(512))
    FailedLoginCount = Column(Integer, default=0, nullable=False)
    LockedUntil = Column(DateTime)
    CreatedAt = Column(DateTime, default=datetime.utcnow, nullable=False)

    Sessions = relationship("UserSession", back_populates="User", cascade="all, delete-orphan")


class UserSession(Base):
    __tablename__ = "user_sessions"

    Id = Column(Integer, primary_key=True, index=True)
    UserId = Column(Integer, ForeignKey("users.Id"), nullable=False, index=True)
    TokenId = Column(String(64), nullable=False, unique=True, index=True)
    CreatedAt = Column(DateTime, default=datetime.utcnow, nullable=False)
    ExpiresAt = Column(DateTime, nullable=False)
    RevokedAt = Column(DateTime)

    User = relationship("User", back_populates="Sessions")
