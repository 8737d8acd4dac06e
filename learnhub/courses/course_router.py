from fastapi import APIRouter, Depends

from learnhub.auth.auth_models import User
from learnhub.auth.auth_utils import get_current_user, require_admin
from learnhub.courses import course_service as service
from learnhub.courses.course_models import CourseCreate, CourseUpdate, LessonCreate
from learnhub.courses.course_repository import CourseRepository
from learnhub.dependencies import get_course_repository, get_enrollment_service
from learnhub.enrollments.enrollment_service import EnrollmentService

router = APIRouter(prefix="/courses", tags=["Course Catalog"])

# ==================== CATALOG ====================

@router.get("")
async def list_courses_endpoint(
    repo: CourseRepository = Depends(get_course_repository),
    user: User = Depends(get_current_user)
):
    """List the whole catalog"""
    courses = await service.list_courses(repo)
    return {
        "courses": [service.serialize_course(c, user) for c in courses],
        "count": len(courses)
    }


@router.get("/{course_id}")
async def get_course_endpoint(
    course_id: str,
    repo: CourseRepository = Depends(get_course_repository),
    enrollments: EnrollmentService = Depends(get_enrollment_service),
    user: User = Depends(get_current_user)
):
    """Course detail; quiz answer keys are hidden from learners"""
    course = await service.get_course_or_404(repo, course_id)
    data = service.serialize_course(course, user)
    data["is_enrolled"] = await enrollments.is_enrolled(user.id, course_id)
    return data

# ==================== ADMIN: COURSES ====================

@router.post("", status_code=201)
async def create_course_endpoint(
    payload: CourseCreate,
    repo: CourseRepository = Depends(get_course_repository),
    admin: User = Depends(require_admin)
):
    course = await service.create_course(repo, payload)
    return course.dict()


@router.put("/{course_id}")
async def update_course_endpoint(
    course_id: str,
    payload: CourseUpdate,
    repo: CourseRepository = Depends(get_course_repository),
    admin: User = Depends(require_admin)
):
    course = await service.update_course(repo, course_id, payload)
    return course.dict()


@router.delete("/{course_id}")
async def delete_course_endpoint(
    course_id: str,
    repo: CourseRepository = Depends(get_course_repository),
    admin: User = Depends(require_admin)
):
    await service.delete_course(repo, course_id)
    return {"success": True, "message": "Course deleted"}

# ==================== ADMIN: LESSONS ====================

@router.post("/{course_id}/lessons", status_code=201)
async def add_lesson_endpoint(
    course_id: str,
    payload: LessonCreate,
    repo: CourseRepository = Depends(get_course_repository),
    admin: User = Depends(require_admin)
):
    lesson = await service.add_lesson(repo, course_id, payload)
    return lesson.dict()


@router.delete("/{course_id}/lessons/{lesson_id}")
async def delete_lesson_endpoint(
    course_id: str,
    lesson_id: str,
    repo: CourseRepository = Depends(get_course_repository),
    admin: User = Depends(require_admin)
):
    course = await service.delete_lesson(repo, course_id, lesson_id)
    return {
        "success": True,
        "message": "Lesson deleted",
        "lesson_count": len(course.lessons),
        # Lets the client fall back to the first lesson when the open one vanished
        "first_lesson_id": course.lessons[0].id if course.lessons else None
    }

# ==================== LESSON VIEW ====================

@router.get("/{course_id}/lessons/{lesson_id}")
async def get_lesson_endpoint(
    course_id: str,
    lesson_id: str,
    repo: CourseRepository = Depends(get_course_repository),
    enrollments: EnrollmentService = Depends(get_enrollment_service),
    user: User = Depends(get_current_user)
):
    """
    Enrolled learners and admins see every lesson;
    everyone else can preview the first lesson only.
    """
    course = await service.get_course_or_404(repo, course_id)
    is_enrolled = await enrollments.is_enrolled(user.id, course_id)
    lesson = service.check_lesson_access(course, lesson_id, user, is_enrolled)

    idx = course.lesson_index(lesson_id)
    next_lesson = course.lessons[idx + 1].id if idx < len(course.lessons) - 1 else None
    progress = await enrollments.progress_of(user.id, course_id)
    return {
        "course_id": course_id,
        "position": idx,
        "lesson": service.serialize_lesson(lesson, user),
        "next_lesson_id": next_lesson,
        "is_enrolled": is_enrolled,
        "is_completed": lesson_id in progress.completed_lessons,
        "best_score": progress.quiz_scores.get(lesson_id)
    }
