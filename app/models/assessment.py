"""Assessment and its ordered multiple-choice questions."""
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, JSON
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from app.db.session import Base


class Assessment(Base):
    __tablename__ = "assessments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    pass_threshold = Column(Integer, nullable=False, default=70)  # percent 0-100
    question_count = Column(Integer, nullable=False, default=0)  # denormalized
    module_id = Column(Integer, ForeignKey("training_modules.id"), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=True)

    module = relationship("TrainingModule", back_populates="assessments")
    questions = relationship(
        "Question",
        back_populates="assessment",
        order_by="Question.sort_order",
        cascade="all, delete-orphan",
    )
    attempts = relationship("Attempt", back_populates="assessment", cascade="all, delete-orphan")


class Question(Base):
    __tablename__ = "questions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    assessment_id = Column(Integer, ForeignKey("assessments.id"), nullable=False, index=True)
    question_text = Column(Text, nullable=False)
    options = Column(JSON, nullable=False)  # list[str], 2+ entries
    correct_option = Column(Integer, nullable=False)  # 0-based index into options
    explanation = Column(Text, nullable=True)
    sort_order = Column(Integer, nullable=False, default=0)

    assessment = relationship("Assessment", back_populates="questions")
