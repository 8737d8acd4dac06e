"""
Catalog operations: course and lesson CRUD, lesson access and answer-key
stripping. The record store does persistence only; validation and id
assignment live here.
"""

import logging
from typing import List

from learnhub.auth.auth_models import User
from learnhub.courses.course_models import (
    Course, CourseCreate, CourseUpdate, Lesson, LessonCreate, LessonType,
    Question, Quiz, PublicLesson, PublicQuiz, PublicQuestion
)
from learnhub.courses.course_repository import CourseRepository
from learnhub.errors import AccessDeniedError, NotFoundError, ValidationError
from learnhub.locks import KeyedLock
from learnhub.utils import generate_id

logger = logging.getLogger(__name__)

# Lesson list edits are read-modify-write on the course record
course_locks = KeyedLock()

# ==================== BUILDERS ====================

def build_quiz(payload) -> Quiz:
    questions = [
        Question(
            id=q.id or generate_id("Q"),
            text=q.text,
            options=q.options,
            correct_option_index=q.correct_option_index,
            explanation=q.explanation
        )
        for q in payload.questions
    ]
    # Answers are keyed by question id
    ids = [q.id for q in questions]
    duplicates = sorted({qid for qid in ids if ids.count(qid) > 1})
    if duplicates:
        raise ValidationError(f"Duplicate question ids: {', '.join(duplicates)}")

    return Quiz(
        id=generate_id("QUIZ"),
        is_graded=payload.is_graded,
        pass_mark=payload.pass_mark,
        questions=questions
    )


def build_lesson(payload: LessonCreate) -> Lesson:
    """
    Validate and materialise a lesson.
    A quiz lesson must own a quiz with at least one question; other lesson
    types must not carry one.
    """
    if not payload.title.strip():
        raise ValidationError("Please enter a lesson title.")

    quiz = None
    if payload.type == LessonType.QUIZ:
        if payload.quiz is None or not payload.quiz.questions:
            raise ValidationError("A quiz must have at least one question.")
        quiz = build_quiz(payload.quiz)
    elif payload.quiz is not None:
        raise ValidationError(f"A {payload.type.value} lesson cannot contain a quiz.")

    return Lesson(
        id=generate_id("LSN"),
        title=payload.title.strip(),
        type=payload.type,
        content=payload.content,
        url=payload.url or None,
        quiz=quiz
    )


def build_course(payload: CourseCreate) -> Course:
    if not payload.title.strip():
        raise ValidationError("Please enter a course title.")

    return Course(
        id=generate_id("COURSE"),
        title=payload.title.strip(),
        description=payload.description,
        instructor=payload.instructor,
        category=payload.category,
        thumbnail=payload.thumbnail,
        enrolled_count=0,
        lessons=[build_lesson(lesson) for lesson in payload.lessons]
    )

# ==================== COURSE CRUD ====================

async def list_courses(repo: CourseRepository) -> List[Course]:
    return await repo.list_courses()


async def get_course_or_404(repo: CourseRepository, course_id: str) -> Course:
    course = await repo.get_course(course_id)
    if not course:
        raise NotFoundError("Course not found")
    return course


async def create_course(repo: CourseRepository, payload: CourseCreate) -> Course:
    course = build_course(payload)
    await repo.create_course(course)
    logger.info("Created course %s (%s) with %d lessons", course.id, course.title, len(course.lessons))
    return course


async def update_course(repo: CourseRepository, course_id: str, payload: CourseUpdate) -> Course:
    updates = {k: v for k, v in payload.dict().items() if v is not None}
    if "title" in updates:
        if not updates["title"].strip():
            raise ValidationError("Please enter a course title.")
        updates["title"] = updates["title"].strip()

    async with course_locks.hold(course_id):
        course = await repo.update_course(course_id, updates)
    if not course:
        raise NotFoundError("Course not found")
    return course


async def delete_course(repo: CourseRepository, course_id: str):
    async with course_locks.hold(course_id):
        deleted = await repo.delete_course(course_id)
    if not deleted:
        raise NotFoundError("Course not found")
    logger.info("Deleted course %s", course_id)

# ==================== LESSONS ====================

async def add_lesson(repo: CourseRepository, course_id: str, payload: LessonCreate) -> Lesson:
    lesson = build_lesson(payload)

    async with course_locks.hold(course_id):
        course = await get_course_or_404(repo, course_id)
        lessons = [l.dict() for l in course.lessons] + [lesson.dict()]
        await repo.update_course(course_id, {"lessons": lessons})

    logger.info("Added %s lesson %s to course %s", lesson.type.value, lesson.id, course_id)
    return lesson


async def delete_lesson(repo: CourseRepository, course_id: str, lesson_id: str) -> Course:
    async with course_locks.hold(course_id):
        course = await get_course_or_404(repo, course_id)
        if course.find_lesson(lesson_id) is None:
            raise NotFoundError("Lesson not found")
        lessons = [l.dict() for l in course.lessons if l.id != lesson_id]
        updated = await repo.update_course(course_id, {"lessons": lessons})

    if not updated:
        raise NotFoundError("Course not found")
    return updated


def check_lesson_access(course: Course, lesson_id: str, user: User, is_enrolled: bool) -> Lesson:
    """
    Admins and enrolled learners see every lesson.
    Anyone else may only preview the first lesson of the course.
    """
    idx = course.lesson_index(lesson_id)
    if idx == -1:
        raise NotFoundError("Lesson not found")
    if not (user.is_admin or is_enrolled or idx == 0):
        raise AccessDeniedError("Enroll in this course to access this lesson.")
    return course.lessons[idx]

# ==================== SERIALIZATION ====================

def to_public_lesson(lesson: Lesson) -> PublicLesson:
    """Lesson without the quiz answer key"""
    quiz = None
    if lesson.quiz is not None:
        quiz = PublicQuiz(
            id=lesson.quiz.id,
            is_graded=lesson.quiz.is_graded,
            pass_mark=lesson.quiz.pass_mark,
            questions=[
                PublicQuestion(id=q.id, text=q.text, options=q.options)
                for q in lesson.quiz.questions
            ]
        )
    return PublicLesson(
        id=lesson.id,
        title=lesson.title,
        type=lesson.type,
        content=lesson.content,
        url=lesson.url,
        quiz=quiz
    )


def serialize_course(course: Course, user: User) -> dict:
    data = course.dict()
    if not user.is_admin:
        data["lessons"] = [to_public_lesson(l).dict() for l in course.lessons]
    return data


def serialize_lesson(lesson: Lesson, user: User) -> dict:
    if user.is_admin:
        return lesson.dict()
    return to_public_lesson(lesson).dict()
