"""
Quiz session routes

The router is the host loop around QuizSession: it turns requests into
engine transitions and, on finalize, hands a passed result to the
enrollment service. The engine and the progress reducer never see each other.
"""

import logging

from fastapi import APIRouter, Depends

from learnhub.assessment.assessment_models import (
    AnswerRequest, NavigateRequest, NavigationAction, StartQuizRequest, ViolationRequest
)
from learnhub.assessment.session_manager import LiveSession, SessionManager
from learnhub.auth.auth_models import User
from learnhub.auth.auth_utils import get_current_user
from learnhub.courses.course_models import LessonType
from learnhub.courses.course_repository import CourseRepository
from learnhub.courses.course_service import get_course_or_404
from learnhub.dependencies import get_course_repository, get_enrollment_service, get_session_manager
from learnhub.enrollments.enrollment_service import EnrollmentService
from learnhub.errors import AccessDeniedError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/quiz-sessions", tags=["Assessments"])


def serialize_session(live: LiveSession) -> dict:
    quiz_session = live.quiz_session
    question = quiz_session.current_question
    data = {
        "session_id": live.session_id,
        "course_id": live.course_id,
        "lesson_id": live.lesson_id,
        "lesson_title": live.lesson_title,
        "is_graded": quiz_session.quiz.is_graded,
        "pass_mark": quiz_session.quiz.pass_mark,
        **quiz_session.snapshot(),
        "is_last_question": quiz_session.is_last_question,
        "current_question": {
            "id": question.id,
            "text": question.text,
            "options": question.options,
            "selected_option": quiz_session.answers.get(question.id),
        },
        "result": None,
    }
    if quiz_session.submitted:
        result = quiz_session.result()
        data["result"] = {
            "score_percent": result.score_percent,
            "passed": result.passed,
            "can_retake": quiz_session.can_retake(),
        }
    return data

# ==================== LIFECYCLE ====================

@router.post("", status_code=201)
async def start_quiz(
    payload: StartQuizRequest,
    repo: CourseRepository = Depends(get_course_repository),
    enrollments: EnrollmentService = Depends(get_enrollment_service),
    sessions: SessionManager = Depends(get_session_manager),
    user: User = Depends(get_current_user)
):
    """Start (or restart) the quiz of a quiz lesson; enrolled learners only"""
    course = await get_course_or_404(repo, payload.course_id)
    lesson = course.find_lesson(payload.lesson_id)
    if lesson is None:
        raise NotFoundError("Lesson not found")
    if lesson.type != LessonType.QUIZ or lesson.quiz is None:
        raise ValidationError("This lesson is not a quiz.")
    if not await enrollments.is_enrolled(user.id, course.id):
        raise AccessDeniedError("Enroll in this course to take its quizzes.")

    live = sessions.start(user.id, course.id, lesson.id, lesson.title, lesson.quiz)
    logger.info("User %s started quiz session %s on lesson %s", user.id, live.session_id, lesson.id)
    return serialize_session(live)


@router.get("/{session_id}")
async def get_quiz_session(
    session_id: str,
    sessions: SessionManager = Depends(get_session_manager),
    user: User = Depends(get_current_user)
):
    return serialize_session(sessions.get(session_id, user.id))


@router.delete("/{session_id}")
async def cancel_quiz(
    session_id: str,
    sessions: SessionManager = Depends(get_session_manager),
    user: User = Depends(get_current_user)
):
    """Quit the assessment; nothing is recorded"""
    sessions.get(session_id, user.id)
    sessions.discard(session_id)
    return {"success": True, "message": "Quiz session cancelled"}

# ==================== IN PROGRESS ====================

@router.post("/{session_id}/answers")
async def select_answer(
    session_id: str,
    payload: AnswerRequest,
    sessions: SessionManager = Depends(get_session_manager),
    user: User = Depends(get_current_user)
):
    live = sessions.get(session_id, user.id)
    live.quiz_session.select_answer(payload.question_id, payload.option_index)
    return serialize_session(live)


@router.post("/{session_id}/navigate")
async def navigate(
    session_id: str,
    payload: NavigateRequest,
    sessions: SessionManager = Depends(get_session_manager),
    user: User = Depends(get_current_user)
):
    live = sessions.get(session_id, user.id)
    if payload.action == NavigationAction.NEXT:
        live.quiz_session.next()
    elif payload.action == NavigationAction.PREVIOUS:
        live.quiz_session.previous()
    else:
        live.quiz_session.go_to_question(payload.index)
    return serialize_session(live)


@router.post("/{session_id}/violations")
async def record_violation(
    session_id: str,
    payload: ViolationRequest,
    sessions: SessionManager = Depends(get_session_manager),
    user: User = Depends(get_current_user)
):
    """Focus left the assessment. Counted and reported back, never enforced."""
    live = sessions.get(session_id, user.id)
    count = live.quiz_session.record_violation()
    logger.warning(
        "Integrity violation (%s) in quiz session %s by user %s, total %d",
        payload.kind.value, session_id, user.id, count
    )
    return {
        "session_id": session_id,
        "violations": count,
        "message": f"Leaving the assessment window is not allowed. Violations: {count}"
    }

# ==================== RESULT ====================

@router.post("/{session_id}/submit")
async def submit_quiz(
    session_id: str,
    sessions: SessionManager = Depends(get_session_manager),
    user: User = Depends(get_current_user)
):
    live = sessions.get(session_id, user.id)
    live.quiz_session.submit()
    return serialize_session(live)


@router.post("/{session_id}/retake")
async def retake_quiz(
    session_id: str,
    sessions: SessionManager = Depends(get_session_manager),
    user: User = Depends(get_current_user)
):
    live = sessions.get(session_id, user.id)
    live.quiz_session.retake()
    return serialize_session(live)


@router.post("/{session_id}/finalize")
async def finalize_quiz(
    session_id: str,
    sessions: SessionManager = Depends(get_session_manager),
    enrollments: EnrollmentService = Depends(get_enrollment_service),
    user: User = Depends(get_current_user)
):
    """
    Accept the result and close the session.
    A pass completes the lesson with its score; a fail records nothing.
    """
    live = sessions.get(session_id, user.id)
    result = live.quiz_session.result()

    enrollment = None
    if result.passed:
        # Completion first: if it is rejected the session stays submitted
        enrollment = await enrollments.complete_lesson(
            user.id, live.course_id, live.lesson_id, result.score_percent
        )

    live.quiz_session.finalize()
    sessions.discard(session_id)

    return {
        "session_id": session_id,
        "score_percent": result.score_percent,
        "passed": result.passed,
        "progress": enrollment.progress if enrollment else None,
        "best_score": enrollment.quiz_scores.get(live.lesson_id) if enrollment else None,
    }
