"""
Store wiring

MONGO_URL set   -> motor-backed collections in DATABASE_NAME
MONGO_URL unset -> in-process stores (lost on restart)
"""

import logging

from motor.motor_asyncio import AsyncIOMotorClient

from learnhub.config import MONGO_URL, DATABASE_NAME
from learnhub.assessment.session_manager import SessionManager
from learnhub.auth.code_mailer import CodeMailer
from learnhub.auth.otp_store import OneTimeCodeStore
from learnhub.courses.course_repository import InMemoryCourseRepository, MongoCourseRepository
from learnhub.enrollments.enrollment_repository import InMemoryEnrollmentRepository, MongoEnrollmentRepository
from learnhub.enrollments.enrollment_service import EnrollmentService

logger = logging.getLogger(__name__)

if MONGO_URL:
    client = AsyncIOMotorClient(MONGO_URL)
    db = client[DATABASE_NAME]
    course_repository = MongoCourseRepository(db)
    enrollment_repository = MongoEnrollmentRepository(db)
else:
    client = None
    db = None
    course_repository = InMemoryCourseRepository()
    enrollment_repository = InMemoryEnrollmentRepository()

enrollment_service = EnrollmentService(course_repository, enrollment_repository)
session_manager = SessionManager()
otp_store = OneTimeCodeStore()
code_mailer = CodeMailer()


async def create_indexes():
    """Create MongoDB indexes; nothing to do for in-process stores"""
    if db is None:
        return
    await course_repository.create_indexes()
    await enrollment_repository.create_indexes()
    logger.info("MongoDB indexes ensured on %s", DATABASE_NAME)
