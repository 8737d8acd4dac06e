from fastapi import APIRouter, Depends
from pydantic import BaseModel

from learnhub.auth.auth_models import User
from learnhub.auth.auth_utils import get_current_user
from learnhub.dependencies import get_enrollment_service
from learnhub.enrollments.enrollment_service import EnrollmentService
from learnhub.enrollments.progress_reducer import Enrollment

router = APIRouter(tags=["Enrollments"])


class EnrollmentCreate(BaseModel):
    course_id: str


def serialize_enrollment(enrollment: Enrollment, is_enrolled: bool = True) -> dict:
    return {
        "user_id": enrollment.user_id,
        "course_id": enrollment.course_id,
        "progress": enrollment.progress,
        "completed_lessons": enrollment.completed_lessons,
        "quiz_scores": enrollment.quiz_scores,
        "is_enrolled": is_enrolled,
    }


@router.post("/enrollments")
async def enroll_endpoint(
    payload: EnrollmentCreate,
    service: EnrollmentService = Depends(get_enrollment_service),
    user: User = Depends(get_current_user)
):
    """Enroll in a course; enrolling twice is a no-op"""
    enrollment, created = await service.enroll(user.id, payload.course_id)
    return {
        "success": True,
        "already_enrolled": not created,
        "message": "Enrolled successfully" if created else "Already enrolled in this course",
        "enrollment": serialize_enrollment(enrollment)
    }


@router.get("/enrollments/me")
async def my_enrollments(
    service: EnrollmentService = Depends(get_enrollment_service),
    user: User = Depends(get_current_user)
):
    """All enrolled courses with live progress"""
    results = []
    for enrollment, course in await service.list_for_user(user.id):
        results.append({
            **serialize_enrollment(enrollment),
            "course": {
                "id": course.id,
                "title": course.title,
                "category": course.category,
                "thumbnail": course.thumbnail,
                "lesson_count": len(course.lessons)
            }
        })
    return {"enrollments": results, "count": len(results)}


@router.get("/courses/{course_id}/progress")
async def course_progress(
    course_id: str,
    service: EnrollmentService = Depends(get_enrollment_service),
    user: User = Depends(get_current_user)
):
    enrollment = await service.progress_of(user.id, course_id)
    return serialize_enrollment(enrollment, await service.is_enrolled(user.id, course_id))


@router.post("/courses/{course_id}/lessons/{lesson_id}/complete")
async def complete_lesson_endpoint(
    course_id: str,
    lesson_id: str,
    service: EnrollmentService = Depends(get_enrollment_service),
    user: User = Depends(get_current_user)
):
    """Mark a video, pdf or text lesson as done"""
    enrollment = await service.complete_content_lesson(user.id, course_id, lesson_id)
    return serialize_enrollment(enrollment)
