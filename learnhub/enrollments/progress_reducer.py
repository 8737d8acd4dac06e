"""
Progress reducer

Pure transitions over Enrollment values. Nothing here touches storage or
mutates its inputs; the enrollment service loads, reduces and saves under a
per-key lock.

Progress is never stored as an independent fact: it is derived from the
completed set and the course's *current* lesson list every time, so adding or
removing lessons moves everyone's progress without a new completion event.
"""

from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from pydantic import BaseModel, Field

from learnhub.errors import NotFoundError, ValidationError
from learnhub.utils import round_half_up, utcnow


class Enrollment(BaseModel):
    user_id: str
    course_id: str
    completed_lessons: List[str] = []
    quiz_scores: Dict[str, int] = {}  # lesson_id -> best score percent
    progress: int = 0  # derived, 0..100
    enrolled_at: datetime = Field(default_factory=utcnow)

    @property
    def key(self) -> Tuple[str, str]:
        return (self.user_id, self.course_id)


def compute_progress(completed: Iterable[str], lesson_ids: Sequence[str]) -> int:
    """
    round(100 * completed / lessons), 0 for an empty course.
    Completions of lessons that were since deleted do not count.
    """
    if not lesson_ids:
        return 0
    done = len(set(completed) & set(lesson_ids))
    return round_half_up(100 * done / len(lesson_ids))


def new_enrollment(user_id: str, course_id: str) -> Enrollment:
    return Enrollment(user_id=user_id, course_id=course_id)


def enroll(existing: Optional[Enrollment], user_id: str, course_id: str) -> Tuple[Enrollment, bool]:
    """Idempotent: returns (enrollment, created)"""
    if existing is not None:
        return existing, False
    return new_enrollment(user_id, course_id), True


def complete_lesson(
    enrollment: Enrollment,
    lesson_id: str,
    lesson_ids: Sequence[str],
    score: Optional[int] = None
) -> Enrollment:
    """
    Add lesson_id to the completed set and keep the best quiz score.

    Scores only move up: applying 40, 90, 30 leaves 90.
    """
    if lesson_id not in lesson_ids:
        raise NotFoundError("Lesson not found")
    if score is not None and not 0 <= score <= 100:
        raise ValidationError("Score must be between 0 and 100")

    completed = list(enrollment.completed_lessons)
    if lesson_id not in completed:
        completed.append(lesson_id)

    scores = dict(enrollment.quiz_scores)
    if score is not None:
        scores[lesson_id] = max(scores.get(lesson_id, 0), score)

    return Enrollment(**{
        **enrollment.dict(),
        "completed_lessons": completed,
        "quiz_scores": scores,
        "progress": compute_progress(completed, lesson_ids),
    })


def refresh_progress(enrollment: Enrollment, lesson_ids: Sequence[str]) -> Enrollment:
    progress = compute_progress(enrollment.completed_lessons, lesson_ids)
    if progress == enrollment.progress:
        return enrollment
    return Enrollment(**{**enrollment.dict(), "progress": progress})


def progress_of(
    enrollment: Optional[Enrollment],
    user_id: str,
    course_id: str,
    lesson_ids: Sequence[str]
) -> Enrollment:
    """Read-only view; a zero-state enrollment when the learner never enrolled"""
    if enrollment is None:
        return new_enrollment(user_id, course_id)
    return refresh_progress(enrollment, lesson_ids)
