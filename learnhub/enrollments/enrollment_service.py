"""
Enrollment service

Sequences the progress reducer against the stores. Every mutation of one
(user_id, course_id) enrollment is an atomic read-modify-write under a
per-key lock, so concurrent completions and score updates merge instead of
overwriting each other.
"""

import logging
from typing import List, Optional, Tuple

from learnhub.courses.course_models import Course, LessonType
from learnhub.courses.course_repository import CourseRepository
from learnhub.enrollments import progress_reducer as reducer
from learnhub.enrollments.enrollment_repository import EnrollmentRepository
from learnhub.enrollments.progress_reducer import Enrollment
from learnhub.errors import AccessDeniedError, NotFoundError, ValidationError
from learnhub.locks import KeyedLock

logger = logging.getLogger(__name__)


class EnrollmentService:

    def __init__(self, courses: CourseRepository, enrollments: EnrollmentRepository):
        self.courses = courses
        self.enrollments = enrollments
        self.locks = KeyedLock()

    async def _get_course(self, course_id: str) -> Course:
        course = await self.courses.get_course(course_id)
        if not course:
            raise NotFoundError("Course not found")
        return course

    async def enroll(self, user_id: str, course_id: str) -> Tuple[Enrollment, bool]:
        """
        Create the enrollment if missing.
        enrolled_count grows exactly once per new enrollment, never on a repeat.
        """
        course = await self._get_course(course_id)

        async with self.locks.hold((user_id, course_id)):
            existing = await self.enrollments.get(user_id, course_id)
            enrollment, created = reducer.enroll(existing, user_id, course_id)
            if created:
                await self.enrollments.save(enrollment)
                await self.courses.increment_enrolled(course_id)
                logger.info("User %s enrolled in course %s", user_id, course_id)

        return reducer.refresh_progress(enrollment, course.lesson_ids()), created

    async def is_enrolled(self, user_id: str, course_id: str) -> bool:
        return await self.enrollments.get(user_id, course_id) is not None

    async def complete_lesson(
        self,
        user_id: str,
        course_id: str,
        lesson_id: str,
        score: Optional[int] = None
    ) -> Enrollment:
        async with self.locks.hold((user_id, course_id)):
            # Re-read inside the lock: progress is measured against the live curriculum
            course = await self._get_course(course_id)
            if course.find_lesson(lesson_id) is None:
                raise NotFoundError("Lesson not found")

            enrollment = await self.enrollments.get(user_id, course_id)
            if enrollment is None:
                raise AccessDeniedError("Enroll in this course before completing lessons.")

            updated = reducer.complete_lesson(enrollment, lesson_id, course.lesson_ids(), score)
            await self.enrollments.save(updated)

        logger.info(
            "User %s completed lesson %s in course %s (score=%s, progress=%d%%)",
            user_id, lesson_id, course_id, score, updated.progress
        )
        return updated

    async def complete_content_lesson(self, user_id: str, course_id: str, lesson_id: str) -> Enrollment:
        """Manual completion; quiz lessons complete only through a passed quiz"""
        course = await self._get_course(course_id)
        lesson = course.find_lesson(lesson_id)
        if lesson is None:
            raise NotFoundError("Lesson not found")
        if lesson.type == LessonType.QUIZ:
            raise ValidationError("Quiz lessons are completed by passing the quiz.")
        return await self.complete_lesson(user_id, course_id, lesson_id)

    async def progress_of(self, user_id: str, course_id: str) -> Enrollment:
        course = await self._get_course(course_id)
        enrollment = await self.enrollments.get(user_id, course_id)
        return reducer.progress_of(enrollment, user_id, course_id, course.lesson_ids())

    async def list_for_user(self, user_id: str) -> List[Tuple[Enrollment, Course]]:
        """Enrollments whose course still exists, progress re-derived"""
        results = []
        for enrollment in await self.enrollments.list_for_user(user_id):
            course = await self.courses.get_course(enrollment.course_id)
            if course:
                results.append((reducer.refresh_progress(enrollment, course.lesson_ids()), course))
        return results
