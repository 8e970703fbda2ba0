from app.schemas.assessment import (
    AnswerSchema,
    AssessmentSchema,
    AttemptRecordSchema,
    AttemptResultSchema,
    QuestionSchema,
    ReviewItemSchema,
)
from app.schemas.auth import SessionContextSchema
from app.schemas.scenario import DecisionNodeSchema, PlayerStateSchema, ScenarioOutSchema
from app.schemas.stats import CertificateOutSchema, ReportOutSchema

__all__ = [
    "AnswerSchema",
    "AssessmentSchema",
    "AttemptRecordSchema",
    "AttemptResultSchema",
    "CertificateOutSchema",
    "DecisionNodeSchema",
    "PlayerStateSchema",
    "QuestionSchema",
    "ReportOutSchema",
    "ReviewItemSchema",
    "ScenarioOutSchema",
    "SessionContextSchema",
]
