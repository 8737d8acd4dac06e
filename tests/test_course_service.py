import pytest

from conftest import run
from learnhub.auth.auth_models import User, UserRole
from learnhub.courses import course_service as service
from learnhub.courses.course_models import (
    CourseCreate, CourseUpdate, LessonCreate, Question, QuestionCreate, Quiz, QuizCreate
)
from learnhub.courses.course_repository import InMemoryCourseRepository
from learnhub.courses.seed import ensure_seed_data
from learnhub.errors import AccessDeniedError, NotFoundError, ValidationError

STUDENT = User(id="u1", name="Jane", email="jane@student.com", role=UserRole.STUDENT, is_verified=True)
ADMIN = User(id="a1", name="Admin", email="admin@learnhub.dev", role=UserRole.ADMIN, is_verified=True)


def quiz_lesson(questions=1) -> LessonCreate:
    return LessonCreate(
        title="Checkpoint",
        type="quiz",
        quiz=QuizCreate(questions=[
            QuestionCreate(text=f"Q{i}", options=["yes", "no"], correct_option_index=1)
            for i in range(questions)
        ])
    )


def test_create_course_assigns_ids():
    repo = InMemoryCourseRepository()
    course = run(service.create_course(repo, CourseCreate(title="  Networking ", lessons=[quiz_lesson()])))
    assert course.id.startswith("COURSE_")
    assert course.title == "Networking"
    assert course.enrolled_count == 0
    assert course.lessons[0].id.startswith("LSN_")
    assert course.lessons[0].quiz.questions[0].id.startswith("Q_")
    assert run(repo.get_course(course.id)).dict() == course.dict()


def test_course_title_required():
    with pytest.raises(ValidationError):
        run(service.create_course(InMemoryCourseRepository(), CourseCreate(title="   ")))


def test_lesson_validation():
    with pytest.raises(ValidationError):
        service.build_lesson(LessonCreate(title=""))
    with pytest.raises(ValidationError):
        service.build_lesson(quiz_lesson(questions=0))
    with pytest.raises(ValidationError):
        service.build_lesson(LessonCreate(title="Reading", type="text", quiz=QuizCreate()))


def test_question_needs_valid_correct_index():
    with pytest.raises(ValueError):
        QuestionCreate(text="?", options=["a", "b"], correct_option_index=2)
    with pytest.raises(ValueError):
        QuestionCreate(text="?", options=["only one"], correct_option_index=0)


def test_update_and_delete_unknown_course(course_repo):
    with pytest.raises(NotFoundError):
        run(service.update_course(course_repo, "missing", CourseUpdate(title="x")))
    with pytest.raises(NotFoundError):
        run(service.delete_course(course_repo, "missing"))


def test_update_merges_partial_fields(course_repo):
    course = run(service.update_course(course_repo, "c1", CourseUpdate(description="New")))
    assert course.description == "New"
    assert course.title == "Shell Basics"
    assert len(course.lessons) == 3


def test_add_and_delete_lesson(course_repo):
    lesson = run(service.add_lesson(course_repo, "c1", quiz_lesson(questions=2)))
    assert run(course_repo.get_course("c1")).lesson_ids()[-1] == lesson.id

    course = run(service.delete_lesson(course_repo, "c1", lesson.id))
    assert lesson.id not in course.lesson_ids()
    with pytest.raises(NotFoundError):
        run(service.delete_lesson(course_repo, "c1", lesson.id))


def test_lesson_access_rule(course):
    assert service.check_lesson_access(course, "l1", STUDENT, is_enrolled=False).id == "l1"
    with pytest.raises(AccessDeniedError):
        service.check_lesson_access(course, "l2", STUDENT, is_enrolled=False)
    assert service.check_lesson_access(course, "l2", STUDENT, is_enrolled=True).id == "l2"
    assert service.check_lesson_access(course, "lq", ADMIN, is_enrolled=False).id == "lq"
    with pytest.raises(NotFoundError):
        service.check_lesson_access(course, "zz", ADMIN, is_enrolled=True)


def test_answer_keys_hidden_from_students(course):
    public = service.serialize_course(course, STUDENT)
    question = public["lessons"][2]["quiz"]["questions"][0]
    assert "correct_option_index" not in question

    full = service.serialize_course(course, ADMIN)
    assert full["lessons"][2]["quiz"]["questions"][0]["correct_option_index"] == 0


def test_seed_only_fills_empty_store():
    repo = InMemoryCourseRepository()
    assert run(ensure_seed_data(repo)) == 2
    assert run(ensure_seed_data(repo)) == 0
    assert run(repo.count()) == 2


def test_quiz_question_ids_must_be_unique():
    payload = LessonCreate(
        title="Checkpoint",
        type="quiz",
        quiz=QuizCreate(pass_mark=1.0, questions=[
            QuestionCreate(id="x", text="First", options=["a", "b"], correct_option_index=0),
            QuestionCreate(id="x", text="Second", options=["a", "b"], correct_option_index=1),
        ])
    )
    with pytest.raises(ValidationError):
        service.build_lesson(payload)

    with pytest.raises(ValueError):
        Quiz(id="quiz-dup", questions=[
            Question(id="x", text="First", options=["a", "b"], correct_option_index=0),
            Question(id="x", text="Second", options=["a", "b"], correct_option_index=1),
        ])


def test_supplied_question_ids_are_kept():
    payload = LessonCreate(
        title="Checkpoint",
        type="quiz",
        quiz=QuizCreate(questions=[
            QuestionCreate(id="x", text="First", options=["a", "b"]),
            QuestionCreate(text="Second", options=["a", "b"]),
        ])
    )
    lesson = service.build_lesson(payload)
    assert lesson.quiz.questions[0].id == "x"
    assert lesson.quiz.questions[1].id.startswith("Q_")
