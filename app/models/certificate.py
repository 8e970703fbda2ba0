"""Certificate model: issued once per passing attempt linked to a module."""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from app.db.session import Base


class Certificate(Base):
    __tablename__ = "certificates"

    id = Column(Integer, primary_key=True, autoincrement=True)
    certificate_number = Column(String(32), unique=True, nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    module_id = Column(Integer, ForeignKey("training_modules.id"), nullable=False, index=True)
    attempt_id = Column(Integer, ForeignKey("attempts.id"), nullable=True, unique=True)
    issued_at = Column(DateTime(timezone=True), nullable=False)
    valid_until = Column(DateTime(timezone=True), nullable=False)

    user = relationship("User", back_populates="certificates")
    module = relationship("TrainingModule")
    attempt = relationship("Attempt", back_populates="certificate")
