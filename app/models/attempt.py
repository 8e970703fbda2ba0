"""Attempt model: one completed submission of an assessment."""
from sqlalchemy import Column, Integer, Boolean, DateTime, ForeignKey, JSON
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from app.db.session import Base


class Attempt(Base):
    __tablename__ = "attempts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    assessment_id = Column(Integer, ForeignKey("assessments.id"), nullable=False, index=True)
    score = Column(Integer, nullable=False, default=0)  # count correct
    total_questions = Column(Integer, nullable=False, default=0)
    passed = Column(Boolean, nullable=False, default=False)
    # answers: JSON array of {question_id, selected_index} in question order
    answers = Column(JSON, nullable=True)
    completed_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=True)

    user = relationship("User", back_populates="attempts")
    assessment = relationship("Assessment", back_populates="attempts")
    certificate = relationship("Certificate", back_populates="attempt", uselist=False)
