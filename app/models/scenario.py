"""Scenario and its decision nodes (flat rows; tree rebuilt by the player)."""
from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from app.db.session import Base


class Scenario(Base):
    __tablename__ = "scenarios"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    module_id = Column(Integer, ForeignKey("training_modules.id"), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=True)

    module = relationship("TrainingModule", back_populates="scenarios")
    nodes = relationship("ScenarioNode", back_populates="scenario", cascade="all, delete-orphan")


class ScenarioNode(Base):
    __tablename__ = "scenario_nodes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    scenario_id = Column(Integer, ForeignKey("scenarios.id"), nullable=False, index=True)
    # null only for the root; acyclicity is not enforced here
    parent_node_id = Column(Integer, ForeignKey("scenario_nodes.id"), nullable=True, index=True)
    is_root = Column(Boolean, nullable=False, default=False)
    node_text = Column(Text, nullable=False)
    is_compliant = Column(Boolean, nullable=True)  # leaves only
    explanation = Column(Text, nullable=True)  # leaves only
    sort_order = Column(Integer, nullable=False, default=0)

    scenario = relationship("Scenario", back_populates="nodes")
