import asyncio
import smtplib
from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from learnhub.assessment.session_manager import SessionManager
from learnhub.auth.code_mailer import CodeMailer
from learnhub.auth.otp_store import OneTimeCodeStore
from learnhub.courses.course_models import Course, Lesson, LessonType, Question, Quiz
from learnhub.courses.course_repository import InMemoryCourseRepository
from learnhub.courses.seed import SAMPLE_COURSES
from learnhub.dependencies import (
    get_code_mailer, get_course_repository, get_enrollment_service, get_otp_store, get_session_manager
)
from learnhub.enrollments.enrollment_repository import InMemoryEnrollmentRepository
from learnhub.enrollments.enrollment_service import EnrollmentService
from learnhub.main import app


def run(coro):
    return asyncio.run(coro)


def make_quiz(correct=(0, 1), pass_mark=0.8, option_count=2) -> Quiz:
    return Quiz(
        id="quiz-1",
        is_graded=True,
        pass_mark=pass_mark,
        questions=[
            Question(
                id=f"q{i + 1}",
                text=f"Question {i + 1}",
                options=[f"option {n}" for n in range(option_count)],
                correct_option_index=answer
            )
            for i, answer in enumerate(correct)
        ]
    )


@pytest.fixture
def quiz():
    """Two questions, pass mark 0.8, correct answers [0, 1]"""
    return make_quiz()


@pytest.fixture
def course(quiz):
    return Course(
        id="c1",
        title="Shell Basics",
        instructor="John Doe",
        category="IT",
        enrolled_count=0,
        lessons=[
            Lesson(id="l1", title="Intro", type=LessonType.VIDEO, content="Welcome"),
            Lesson(id="l2", title="Permissions", type=LessonType.TEXT, content="chmod"),
            Lesson(id="lq", title="Checkpoint", type=LessonType.QUIZ, quiz=quiz),
        ]
    )


@pytest.fixture
def course_repo(course):
    repo = InMemoryCourseRepository()
    run(repo.create_course(course))
    return repo


@pytest.fixture
def enrollment_repo():
    return InMemoryEnrollmentRepository()


@pytest.fixture
def enrollment_service(course_repo, enrollment_repo):
    return EnrollmentService(course_repo, enrollment_repo)


@pytest.fixture
def session_manager():
    return SessionManager()


@pytest.fixture
def otp_store():
    return OneTimeCodeStore()


@pytest.fixture
def code_mailer():
    """No SMTP credentials: codes come back as dev_code"""
    return CodeMailer(user=None, password=None)


@pytest.fixture
def client(course_repo, enrollment_service, session_manager, otp_store, code_mailer):
    for data in SAMPLE_COURSES:
        run(course_repo.create_course(Course(**data)))

    app.dependency_overrides[get_course_repository] = lambda: course_repo
    app.dependency_overrides[get_enrollment_service] = lambda: enrollment_service
    app.dependency_overrides[get_session_manager] = lambda: session_manager
    app.dependency_overrides[get_otp_store] = lambda: otp_store
    app.dependency_overrides[get_code_mailer] = lambda: code_mailer
    yield TestClient(app)
    app.dependency_overrides.clear()


class FakeClock:
    def __init__(self):
        self.now = datetime(2024, 1, 1, 12, 0, 0)

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


class FakeSMTP:
    """Records what would have gone over the wire"""

    instances = []

    def __init__(self, host, port, timeout=None):
        self.host = host
        self.port = port
        self.started_tls = False
        self.logged_in_as = None
        self.sent = []
        FakeSMTP.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def starttls(self):
        self.started_tls = True

    def login(self, user, password):
        self.logged_in_as = user

    def send_message(self, message):
        self.sent.append(message)


class RejectingSMTP(FakeSMTP):

    def login(self, user, password):
        raise smtplib.SMTPAuthenticationError(535, b"bad credentials")


def login(client, email="jane@student.com", role="STUDENT", name="Jane Student") -> dict:
    """Run the two-step code login and return auth headers"""
    sent = client.post("/auth/send-code", json={"email": email, "name": name, "role": role})
    assert sent.status_code == 200
    code = sent.json()["dev_code"]
    verified = client.post(
        "/auth/verify",
        json={"email": email, "code": code, "name": name, "role": role}
    )
    assert verified.status_code == 200
    return {"Authorization": f"Bearer {verified.json()['access_token']}"}


@pytest.fixture
def student_headers(client):
    return login(client)


@pytest.fixture
def admin_headers(client):
    return login(client, email="admin@learnhub.dev", role="ADMIN", name="Admin User")
