"""Assessment engine: collect one answer per question, score, review.

The engine is pure and in-memory. Persisting the attempt and issuing the
certificate happen in ``app.services.submission``.
"""
import time
from typing import Callable, Iterable

from app.core.exceptions import (
    AlreadySubmittedError,
    IncompleteSubmissionError,
    InvalidAnswerError,
    NoQuestionsError,
)
from app.schemas.assessment import (
    AnswerSchema,
    AssessmentSchema,
    AttemptRecordSchema,
    CheckResultSchema,
    QuestionSchema,
    ReviewItemSchema,
)
from app.services.scoring import compute_percentage, is_passing


class AssessmentEngine:
    def __init__(
        self,
        assessment: AssessmentSchema,
        questions: Iterable[QuestionSchema],
        feedback_seconds: float = 0.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.assessment = assessment
        self.questions = sorted(questions, key=lambda q: (q.sort_order, q.id))
        if not self.questions:
            raise NoQuestionsError(assessment.id)
        self._by_id = {q.id: q for q in self.questions}
        self.answers: dict[int, int] = {}
        self.feedback_seconds = feedback_seconds
        self._clock = clock
        self._feedback_until: dict[int, float] = {}
        self.record: AttemptRecordSchema | None = None

    @property
    def total(self) -> int:
        return len(self.questions)

    @property
    def pass_threshold(self) -> int:
        return self.assessment.pass_threshold

    @property
    def submitted(self) -> bool:
        return self.record is not None

    def _question(self, question_id: int) -> QuestionSchema:
        try:
            return self._by_id[question_id]
        except KeyError:
            raise InvalidAnswerError(
                f"Question {question_id} is not part of this assessment",
                extra={"question_id": question_id},
            ) from None

    def select_answer(self, question_id: int, option_index: int) -> None:
        """Record or overwrite the answer for one question."""
        if self.submitted:
            raise AlreadySubmittedError()
        question = self._question(question_id)
        if not 0 <= option_index < len(question.options):
            raise InvalidAnswerError(
                f"Option {option_index} out of range for question {question_id}",
                extra={"question_id": question_id, "option_index": option_index},
            )
        self.answers[question_id] = option_index
        # a new selection closes any feedback window for the old one
        self._feedback_until.pop(question_id, None)

    def select_answers(self, answers: Iterable[AnswerSchema]) -> None:
        for answer in answers:
            self.select_answer(answer.question_id, answer.selected_index)

    def is_answered(self, question_id: int) -> bool:
        return question_id in self.answers

    def can_advance(self, question_index: int) -> bool:
        """True once the question at question_index is answered and its feedback has been shown."""
        if not 0 <= question_index < self.total:
            return False
        question_id = self.questions[question_index].id
        if question_id not in self.answers:
            return False
        until = self._feedback_until.get(question_id)
        return until is None or self._clock() >= until

    def can_go_back(self, question_index: int) -> bool:
        return 0 < question_index < self.total

    def check_answer(self, question_id: int) -> CheckResultSchema:
        """Reveal correctness of the recorded answer and open the feedback window."""
        question = self._question(question_id)
        if question_id not in self.answers:
            raise InvalidAnswerError(
                f"Question {question_id} has no answer to check",
                extra={"question_id": question_id},
            )
        selected = self.answers[question_id]
        if self.feedback_seconds > 0:
            self._feedback_until[question_id] = self._clock() + self.feedback_seconds
        return CheckResultSchema(
            question_id=question_id,
            selected_index=selected,
            is_correct=selected == question.correct_option,
            correct_option=question.correct_option,
            explanation=question.explanation,
            feedback_seconds=self.feedback_seconds,
        )

    def score(self) -> int:
        return sum(1 for q in self.questions if self.answers.get(q.id) == q.correct_option)

    def percentage(self) -> int:
        return compute_percentage(self.score(), self.total)

    def passed(self) -> bool:
        return is_passing(self.percentage(), self.pass_threshold)

    def missing(self) -> list[int]:
        return [q.id for q in self.questions if q.id not in self.answers]

    def submit(self) -> AttemptRecordSchema:
        """Score a complete answer set and freeze it.

        Raises IncompleteSubmissionError when any question is unanswered; the
        engine is left untouched so the learner can finish and retry.
        """
        if self.submitted:
            raise AlreadySubmittedError()
        missing = self.missing()
        if missing:
            raise IncompleteSubmissionError(missing)
        self.record = self.build_record()
        return self.record

    def build_record(self) -> AttemptRecordSchema:
        return AttemptRecordSchema(
            assessment_id=self.assessment.id,
            score=self.score(),
            total=self.total,
            percentage=self.percentage(),
            passed=self.passed(),
            answers=[
                AnswerSchema(question_id=q.id, selected_index=self.answers[q.id])
                for q in self.questions
            ],
        )

    def reset_submission(self) -> None:
        """Return to the pre-submission state after a failed write."""
        self.record = None

    def review(self) -> list[ReviewItemSchema]:
        if not self.submitted:
            raise InvalidAnswerError("Review is available after submission")
        items = []
        for q in self.questions:
            selected = self.answers[q.id]
            items.append(
                ReviewItemSchema(
                    question_id=q.id,
                    question_text=q.question_text,
                    selected_index=selected,
                    is_correct=selected == q.correct_option,
                    chosen_text=q.options[selected],
                    correct_text=q.options[q.correct_option],
                    explanation=q.explanation,
                )
            )
        return items
