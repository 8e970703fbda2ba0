"""Score a submission and persist attempt + certificate in one transaction."""
import logging
from datetime import datetime, timezone
from typing import Iterable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.core.exceptions import SubmissionError
from app.models.attempt import Attempt
from app.schemas.assessment import AnswerSchema, AttemptResultSchema, CheckResultSchema
from app.services.assessment_engine import AssessmentEngine
from app.services.certificates import build_certificate
from app.services.store import load_assessment, load_questions

logger = logging.getLogger(__name__)


async def build_engine(db: AsyncSession, assessment_id: int) -> AssessmentEngine:
    settings = get_settings()
    assessment = await load_assessment(db, assessment_id)
    questions = await load_questions(db, assessment_id)
    return AssessmentEngine(assessment, questions, feedback_seconds=settings.feedback_window_seconds)


async def check_answer(db: AsyncSession, assessment_id: int, answer: AnswerSchema) -> CheckResultSchema:
    engine = await build_engine(db, assessment_id)
    engine.select_answer(answer.question_id, answer.selected_index)
    return engine.check_answer(answer.question_id)


async def record_attempt(db: AsyncSession, engine: AssessmentEngine, user_id: int) -> AttemptResultSchema:
    """Submit the engine and write the attempt, plus a certificate when it passed.

    Both rows are committed together; on failure nothing is written and the
    engine goes back to its pre-submission state.
    """
    record = engine.submit()
    module_id = engine.assessment.module_id
    completed_at = datetime.now(timezone.utc)
    certificate_number = None
    try:
        attempt = Attempt(
            user_id=user_id,
            assessment_id=record.assessment_id,
            score=record.score,
            total_questions=record.total,
            passed=record.passed,
            answers=[a.model_dump() for a in record.answers],
            completed_at=completed_at,
        )
        db.add(attempt)
        await db.flush()
        attempt_id = attempt.id

        if record.passed and module_id is not None:
            certificate = build_certificate(
                user_id=user_id,
                module_id=module_id,
                attempt_id=attempt_id,
                issued_at=completed_at,
            )
            db.add(certificate)
            certificate_number = certificate.certificate_number

        # nothing after the commit may raise into this handler
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        engine.reset_submission()
        logger.error(
            "Could not record attempt for user %s on assessment %s: %s",
            user_id,
            record.assessment_id,
            exc,
        )
        raise SubmissionError(type(exc).__name__) from exc

    logger.info(
        "Attempt %s recorded: user=%s assessment=%s score=%d/%d (%d%%) passed=%s certificate=%s",
        attempt_id,
        user_id,
        record.assessment_id,
        record.score,
        record.total,
        record.percentage,
        record.passed,
        certificate_number,
    )
    return AttemptResultSchema(
        attempt_id=attempt_id,
        score=record.score,
        total=record.total,
        percentage=record.percentage,
        passed=record.passed,
        certificate_number=certificate_number,
        completed_at=completed_at,
        review=engine.review(),
    )


async def submit_assessment(
    db: AsyncSession,
    assessment_id: int,
    user_id: int,
    answers: Iterable[AnswerSchema],
) -> AttemptResultSchema:
    engine = await build_engine(db, assessment_id)
    engine.select_answers(answers)
    return await record_attempt(db, engine, user_id)
