"""User model with a single role used for admin gating."""
from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from app.db.session import Base

ROLE_LEARNER = "learner"
ROLE_COMPLIANCE_OFFICER = "compliance_officer"
ROLE_ADMIN = "admin"
ROLES = (ROLE_LEARNER, ROLE_COMPLIANCE_OFFICER, ROLE_ADMIN)


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    hashed_password = Column(String(255), nullable=False)
    full_name = Column(String(255), nullable=False, default="")
    department = Column(String(64), nullable=True)
    role = Column(String(32), nullable=False, default=ROLE_LEARNER)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=True)

    attempts = relationship("Attempt", back_populates="user")
    certificates = relationship("Certificate", back_populates="user")
