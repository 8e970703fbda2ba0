"""Training module: markdown content split into sections by '## ' headings."""
from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, JSON
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from app.db.session import Base


class TrainingModule(Base):
    __tablename__ = "training_modules"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    content = Column(Text, nullable=True)
    dpdp_section = Column(String(64), nullable=False, default="")
    duration_minutes = Column(Integer, nullable=False, default=15)
    is_mandatory = Column(Boolean, nullable=False, default=True)
    objectives = Column(JSON, nullable=True)  # list[str]
    version = Column(String(16), nullable=False, default="1.0")
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=True)

    scenarios = relationship("Scenario", back_populates="module")
    assessments = relationship("Assessment", back_populates="module")
