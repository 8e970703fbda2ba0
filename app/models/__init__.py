from app.models.user import User
from app.models.module import TrainingModule
from app.models.scenario import Scenario, ScenarioNode
from app.models.assessment import Assessment, Question
from app.models.attempt import Attempt
from app.models.certificate import Certificate
from app.models.progress import ModuleProgress

__all__ = [
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
