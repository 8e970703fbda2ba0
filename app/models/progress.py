"""Module progress: one bookmark row per (user, module)."""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from app.db.session import Base

STATUS_IN_PROGRESS = "in_progress"
STATUS_COMPLETED = "completed"


class ModuleProgress(Base):
    __tablename__ = "module_progress"
    __table_args__ = (UniqueConstraint("user_id", "module_id", name="uq_module_progress_user_module"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    module_id = Column(Integer, ForeignKey("training_modules.id"), nullable=False, index=True)

    last_section = Column(String(255), nullable=True)
    progress_percent = Column(Integer, nullable=False, default=0)  # 0-100
    status = Column(String(16), nullable=False, default=STATUS_IN_PROGRESS)
    started_at = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)  # cleared when reopened
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=True)

    module = relationship("TrainingModule")
