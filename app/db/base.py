"""SQLAlchemy declarative base and model imports for Alembic."""
from app.db.session import Base

# Import all models so Alembic can see them
from app.models.assessment import Assessment, Question  # noqa: F401
from app.models.attempt import Attempt  # noqa: F401
from app.models.certificate import Certificate  # noqa: F401
from app.models.module import TrainingModule  # noqa: F401
from app.models.progress import ModuleProgress  # noqa: F401
from app.models.scenario import Scenario, ScenarioNode  # noqa: F401
from app.models.user import User  # noqa: F401

__all__ = [
    "Base",
    "User",
    "TrainingModule",
    "Scenario",
    "ScenarioNode",
    "Assessment",
    "Question",
    "Attempt",
    "Certificate",
    "ModuleProgress",
]
