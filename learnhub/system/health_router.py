import logging

from fastapi import APIRouter, Depends

from learnhub.assessment.session_manager import SessionManager
from learnhub.config import VERSION
from learnhub.courses.course_repository import CourseRepository
from learnhub.dependencies import get_course_repository, get_session_manager
from learnhub.utils import utcnow

logger = logging.getLogger(__name__)

router = APIRouter(tags=["System"])


@router.get("/health")
async def health(
    repo: CourseRepository = Depends(get_course_repository),
    sessions: SessionManager = Depends(get_session_manager)
):
    """Liveness plus a storage round-trip"""
    record = {
        "timestamp": utcnow(),
        "status": "ok",
        "storage": {"backend": repo.backend, "status": "UP"},
        "live_quiz_sessions": len(sessions),
    }
    try:
        record["storage"]["courses"] = await repo.count()
    except Exception as e:
        logger.error("Storage health check failed: %s", e)
        record["status"] = "degraded"
        record["storage"]["status"] = "DOWN"
    return record


@router.get("/version")
def get_version():
    return {"version": VERSION, "status": "stable"}
