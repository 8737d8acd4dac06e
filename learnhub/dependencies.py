from learnhub import database
from learnhub.assessment.session_manager import SessionManager
from learnhub.auth.code_mailer import CodeMailer
from learnhub.auth.otp_store import OneTimeCodeStore
from learnhub.courses.course_repository import CourseRepository
from learnhub.enrollments.enrollment_service import EnrollmentService

# ==================== DEPENDENCY FUNCTIONS ====================
# Overridden in tests through app.dependency_overrides


def get_course_repository() -> CourseRepository:
    return database.course_repository


def get_enrollment_service() -> EnrollmentService:
    return database.enrollment_service


def get_session_manager() -> SessionManager:
    return database.session_manager


def get_otp_store() -> OneTimeCodeStore:
    return database.otp_store


def get_code_mailer() -> CodeMailer:
    return database.code_mailer
