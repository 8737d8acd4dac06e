"""
Quiz assessment engine

A QuizSession is the whole lifecycle of one learner attempting one quiz:

    NOT_STARTED -> IN_PROGRESS -> SUBMITTED -> IN_PROGRESS  (retake, failed only)
                                            -> FINALIZED    (result accepted)

Answers, navigation and violations are only accepted while IN_PROGRESS.
SUBMITTED freezes the answers for scoring. FINALIZED is terminal; the caller
hands the result to the progress reducer and drops the session.

Every operation is synchronous and in-memory. A rejected operation raises
and leaves the session exactly as it was.
"""

from enum import Enum
from typing import Dict, List, NamedTuple

from learnhub.courses.course_models import Question, Quiz
from learnhub.errors import IncompleteSubmissionError, NotFoundError, ValidationError
from learnhub.utils import round_half_up


class SessionState(str, Enum):
    NOT_STARTED = "NOT_STARTED"
    IN_PROGRESS = "IN_PROGRESS"
    SUBMITTED = "SUBMITTED"
    FINALIZED = "FINALIZED"


class QuizResult(NamedTuple):
    score_percent: int
    passed: bool


class QuizSession:

    def __init__(self, quiz: Quiz):
        self.quiz = quiz
        self.current_index = 0
        self.answers: Dict[str, int] = {}
        self.submitted = False
        self.violations = 0
        self.attempts = 0
        self.finalized = False
        self._started = False

    @classmethod
    def start(cls, quiz: Quiz) -> "QuizSession":
        """Fresh session on the first question. A quiz without questions cannot start."""
        if not quiz.questions:
            raise ValidationError("A quiz must have at least one question.")
        session = cls(quiz)
        session._started = True
        session.attempts = 1
        return session

    # ==================== STATE ====================

    @property
    def state(self) -> SessionState:
        if self.finalized:
            return SessionState.FINALIZED
        if self.submitted:
            return SessionState.SUBMITTED
        if self._started:
            return SessionState.IN_PROGRESS
        return SessionState.NOT_STARTED

    @property
    def question_count(self) -> int:
        return len(self.quiz.questions)

    @property
    def current_question(self) -> Question:
        return self.quiz.questions[self.current_index]

    @property
    def is_last_question(self) -> bool:
        return self.current_index == self.question_count - 1

    def unanswered(self) -> List[str]:
        return [q.id for q in self.quiz.questions if q.id not in self.answers]

    def _in_progress(self) -> bool:
        return self.state == SessionState.IN_PROGRESS

    def _ensure_not_finalized(self):
        if self.finalized:
            raise ValidationError("This quiz session has already been finalized.")

    # ==================== ANSWERING ====================

    def select_answer(self, question_id: str, option_index: int):
        """Record or overwrite an answer; silently ignored once submitted"""
        self._ensure_not_finalized()
        if not self._in_progress():
            return

        question = self.quiz.find_question(question_id)
        if question is None:
            raise NotFoundError(f"Question {question_id} is not part of this quiz")
        if not 0 <= option_index < len(question.options):
            raise ValidationError(
                f"Option index {option_index} is out of range for question {question_id}"
            )
        self.answers[question_id] = option_index

    # ==================== NAVIGATION ====================

    def go_to_question(self, index: int):
        """Move the pointer, clamped into [0, count - 1]"""
        self._ensure_not_finalized()
        if not self._in_progress():
            return
        self.current_index = max(0, min(self.question_count - 1, index))

    def next(self):
        self.go_to_question(self.current_index + 1)

    def previous(self):
        self.go_to_question(self.current_index - 1)

    # ==================== INTEGRITY ====================

    def record_violation(self) -> int:
        """
        Count a focus loss (tab switch, hidden window) before submission.
        Shown to the learner only: it never blocks answering or fails the quiz.
        """
        self._ensure_not_finalized()
        if self._in_progress():
            self.violations += 1
        return self.violations

    # ==================== SUBMISSION & SCORING ====================

    def submit(self):
        self._ensure_not_finalized()
        if self.submitted:
            return
        if not self._started:
            raise ValidationError("The quiz has not been started.")

        missing = self.unanswered()
        if missing:
            raise IncompleteSubmissionError(missing)
        self.submitted = True

    def correct_count(self) -> int:
        return sum(
            1 for q in self.quiz.questions
            if self.answers.get(q.id) == q.correct_option_index
        )

    def score(self) -> float:
        """Fraction of questions answered correctly"""
        return self.correct_count() / self.question_count

    def result(self) -> QuizResult:
        if not self.submitted:
            raise ValidationError("Submit the quiz before requesting a result.")
        score = self.score()
        return QuizResult(
            score_percent=round_half_up(score * 100),
            passed=score >= self.quiz.pass_mark
        )

    def can_retake(self) -> bool:
        return self.state == SessionState.SUBMITTED and not self.result().passed

    def retake(self):
        """Fresh attempt over the same quiz; only offered after a failed result"""
        if not self.can_retake():
            raise ValidationError("Only a submitted, failed quiz can be retaken.")
        self.current_index = 0
        self.answers = {}
        self.submitted = False
        self.violations = 0
        self.attempts += 1

    def finalize(self) -> QuizResult:
        """Accept the result. Terminal: the session takes no further input."""
        self._ensure_not_finalized()
        result = self.result()
        self.finalized = True
        return result

    def snapshot(self) -> dict:
        return {
            "state": self.state.value,
            "current_index": self.current_index,
            "question_count": self.question_count,
            "answers": dict(self.answers),
            "unanswered": self.unanswered(),
            "submitted": self.submitted,
            "violations": self.violations,
            "attempts": self.attempts,
        }
