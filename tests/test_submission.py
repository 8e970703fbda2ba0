from __future__ import annotations

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import (
    AlreadySubmittedError,
    IncompleteSubmissionError,
    NotFoundError,
    SubmissionError,
)
from app.models.attempt import Attempt
from app.models.certificate import Certificate
from app.schemas.assessment import AnswerSchema
from app.services.certificates import (
    count_attempts_missing_certificate,
    list_certificates,
    reconcile_missing_certificates,
)
from app.services.submission import build_engine, check_answer, record_attempt, submit_assessment
from tests.utils import create_module_with_content, create_quiz, create_user


async def _count(db, model) -> int:
    result = await db.execute(select(func.count(model.id)))
    return result.scalar()


def _answers(quiz_questions, selected):
    return [AnswerSchema(question_id=q.id, selected_index=s) for q, s in zip(quiz_questions, selected)]


@pytest.fixture()
async def user(db_session):
    return await create_user(db_session)


@pytest.fixture()
async def module(db_session):
    return await create_module_with_content(db_session)


async def test_passing_attempt_issues_certificate(db_session, user, module):
    quiz = await create_quiz(db_session, module_id=module.id)
    engine = await build_engine(db_session, quiz.id)

    result = await submit_assessment(db_session, quiz.id, user.id, _answers(engine.questions, [0, 1, 2, 0]))

    assert result.score == 3
    assert result.percentage == 75
    assert result.passed is True
    assert result.certificate_number.startswith("CT-")
    assert len(result.review) == 4
    assert result.review[3].is_correct is False

    attempt = (await db_session.execute(select(Attempt))).scalar_one()
    assert attempt.answers == [
        {"question_id": q.id, "selected_index": s} for q, s in zip(engine.questions, [0, 1, 2, 0])
    ]
    cert = (await db_session.execute(select(Certificate))).scalar_one()
    assert cert.attempt_id == attempt.id
    assert cert.module_id == module.id

    certs = await list_certificates(db_session, user.id)
    assert [c.certificate_number for c in certs] == [result.certificate_number]
    assert certs[0].is_valid is True
    assert certs[0].module_title == module.title


async def test_failing_attempt_issues_no_certificate(db_session, user, module):
    quiz = await create_quiz(db_session, module_id=module.id)
    engine = await build_engine(db_session, quiz.id)

    result = await submit_assessment(db_session, quiz.id, user.id, _answers(engine.questions, [1, 0, 2, 0]))

    assert result.score == 1
    assert result.percentage == 25
    assert result.passed is False
    assert result.certificate_number is None
    assert await _count(db_session, Attempt) == 1
    assert await _count(db_session, Certificate) == 0


async def test_pass_without_module_issues_no_certificate(db_session, user):
    quiz = await create_quiz(db_session, module_id=None)
    engine = await build_engine(db_session, quiz.id)

    result = await submit_assessment(db_session, quiz.id, user.id, _answers(engine.questions, [0, 1, 2, 3]))

    assert result.passed is True
    assert result.certificate_number is None
    assert await _count(db_session, Certificate) == 0


async def test_incomplete_submission_writes_nothing(db_session, user, module):
    quiz = await create_quiz(db_session, module_id=module.id)
    engine = await build_engine(db_session, quiz.id)

    with pytest.raises(IncompleteSubmissionError):
        await submit_assessment(db_session, quiz.id, user.id, _answers(engine.questions[:2], [0, 1]))
    assert await _count(db_session, Attempt) == 0


async def test_write_failure_rolls_back_and_keeps_engine_open(db_session, user, module, monkeypatch):
    # rollback expires loaded rows, so keep plain ids
    user_id = user.id
    quiz = await create_quiz(db_session, module_id=module.id)
    engine = await build_engine(db_session, quiz.id)
    engine.select_answers(_answers(engine.questions, [0, 1, 2, 3]))

    async def failing_commit(self):
        raise OperationalError("COMMIT", {}, Exception("database is locked"))

    monkeypatch.setattr(AsyncSession, "commit", failing_commit)
    with pytest.raises(SubmissionError):
        await record_attempt(db_session, engine, user_id)
    monkeypatch.undo()

    assert engine.submitted is False
    assert await _count(db_session, Attempt) == 0
    assert await _count(db_session, Certificate) == 0

    result = await record_attempt(db_session, engine, user_id)
    assert result.passed is True
    assert await _count(db_session, Attempt) == 1
    assert await _count(db_session, Certificate) == 1


async def test_committed_attempt_is_not_reported_as_failed(db_session, user, module, monkeypatch):
    user_id = user.id
    quiz = await create_quiz(db_session, module_id=module.id)
    engine = await build_engine(db_session, quiz.id)
    engine.select_answers(_answers(engine.questions, [0, 1, 2, 3]))

    async def failing_refresh(self, instance, *args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("connection lost"))

    monkeypatch.setattr(AsyncSession, "refresh", failing_refresh)
    result = await record_attempt(db_session, engine, user_id)
    monkeypatch.undo()

    assert result.passed is True
    assert result.completed_at is not None
    assert engine.submitted is True
    assert await _count(db_session, Attempt) == 1
    assert await _count(db_session, Certificate) == 1

    with pytest.raises(AlreadySubmittedError):
        await record_attempt(db_session, engine, user_id)
    assert await _count(db_session, Attempt) == 1
    assert await _count(db_session, Certificate) == 1


async def test_reconcile_repairs_missing_certificates(db_session, user, module):
    quiz = await create_quiz(db_session, module_id=module.id)
    other = await create_quiz(db_session, module_id=None)
    db_session.add_all(
        [
            Attempt(user_id=user.id, assessment_id=quiz.id, score=4, total_questions=4, passed=True, answers=[]),
            Attempt(user_id=user.id, assessment_id=quiz.id, score=1, total_questions=4, passed=False, answers=[]),
            Attempt(user_id=user.id, assessment_id=other.id, score=4, total_questions=4, passed=True, answers=[]),
        ]
    )
    await db_session.commit()
    assert await count_attempts_missing_certificate(db_session) == 1

    issued = await reconcile_missing_certificates(db_session)

    assert len(issued) == 1
    assert issued[0].module_id == module.id
    assert await count_attempts_missing_certificate(db_session) == 0
    assert await reconcile_missing_certificates(db_session) == []


async def test_check_answer_reveals_correctness(db_session, module):
    quiz = await create_quiz(db_session, module_id=module.id)
    engine = await build_engine(db_session, quiz.id)
    question = engine.questions[1]

    result = await check_answer(db_session, quiz.id, AnswerSchema(question_id=question.id, selected_index=1))

    assert result.is_correct is True
    assert result.explanation == "Answer is B"


async def test_unknown_assessment(db_session):
    with pytest.raises(NotFoundError):
        await build_engine(db_session, 404)
