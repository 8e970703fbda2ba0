"""Domain errors for scenarios, assessments and certificates.

Services raise these; ``register_exception_handlers`` turns them into JSON
responses of the form ``{"detail": ..., "error_code": ...}``.
"""
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse


class TrainingError(Exception):
    """Base error for the training domain."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    error_code: str = "TRAINING_ERROR"

    def __init__(self, detail: str, extra: Optional[Dict[str, Any]] = None):
        super().__init__(detail)
        self.detail = detail
        self.extra = extra or {}


class NotFoundError(TrainingError):
    status_code = status.HTTP_404_NOT_FOUND
    error_code = "NOT_FOUND"

    def __init__(self, entity: str, entity_id: Any):
        super().__init__(
            f"{entity} '{entity_id}' not found",
            extra={"entity": entity, "id": entity_id},
        )


class EmptyScenarioError(TrainingError):
    status_code = status.HTTP_404_NOT_FOUND
    error_code = "NO_DECISION_TREE"

    def __init__(self, scenario_id: Any):
        super().__init__(
            "No decision tree configured for this scenario",
            extra={"scenario_id": scenario_id},
        )


class MalformedTreeError(TrainingError):
    status_code = status.HTTP_409_CONFLICT
    error_code = "MALFORMED_TREE"


class InvalidChoiceError(TrainingError):
    error_code = "INVALID_CHOICE"


class NoQuestionsError(TrainingError):
    status_code = status.HTTP_404_NOT_FOUND
    error_code = "NO_QUESTIONS"

    def __init__(self, assessment_id: Any):
        super().__init__(
            "No questions configured for this assessment",
            extra={"assessment_id": assessment_id},
        )


class InvalidAnswerError(TrainingError):
    error_code = "INVALID_ANSWER"


class IncompleteSubmissionError(TrainingError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    error_code = "INCOMPLETE_SUBMISSION"

    def __init__(self, missing: list):
        super().__init__(
            f"{len(missing)} question(s) not answered",
            extra={"missing_question_ids": missing},
        )


class ModuleInUseError(TrainingError):
    status_code = status.HTTP_409_CONFLICT
    error_code = "MODULE_HAS_CERTIFICATES"

    def __init__(self, module_id: Any, certificates: int):
        super().__init__(
            "Module has issued certificates and cannot be deleted",
            extra={"module_id": module_id, "certificates": certificates},
        )


class AlreadySubmittedError(TrainingError):
    status_code = status.HTTP_409_CONFLICT
    error_code = "ALREADY_SUBMITTED"

    def __init__(self):
        super().__init__("Assessment already submitted")


class SubmissionError(TrainingError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    error_code = "SUBMISSION_FAILED"

    def __init__(self, reason: str = ""):
        super().__init__(
            "Could not record attempt, please try again",
            extra={"reason": reason} if reason else None,
        )


async def training_error_handler(request: Request, exc: TrainingError) -> JSONResponse:
    content: Dict[str, Any] = {"detail": exc.detail, "error_code": exc.error_code}
    if exc.extra:
        content["extra"] = exc.extra
    return JSONResponse(status_code=exc.status_code, content=content)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(TrainingError, training_error_handler)
