from app.services.assessment_engine import AssessmentEngine
from app.services.scenario_player import ScenarioPlayer, ScenarioTree
from app.services.scoring import compute_percentage, is_passing
from app.services.seeding import seed_demo_data

__all__ = [
    "AssessmentEngine",
    "ScenarioPlayer",
    "ScenarioTree",
    "compute_percentage",
    "is_passing",
    "seed_demo_data",
]
