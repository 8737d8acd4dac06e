import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, Dict, Optional, Tuple

from learnhub.assessment.quiz_engine import QuizSession
from learnhub.config import QUIZ_SESSION_TTL_MINUTES
from learnhub.courses.course_models import Quiz
from learnhub.errors import AccessDeniedError, NotFoundError
from learnhub.utils import generate_id, utcnow

logger = logging.getLogger(__name__)


@dataclass
class LiveSession:
    session_id: str
    user_id: str
    course_id: str
    lesson_id: str
    lesson_title: str
    quiz_session: QuizSession
    created_at: datetime = field(default_factory=utcnow)
    last_active_at: datetime = field(default_factory=utcnow)


class SessionManager:
    """
    Owns the ephemeral quiz sessions. Nothing here is persisted: a session
    that is cancelled, replaced or left idle past the TTL simply disappears.
    """

    def __init__(self, ttl_minutes: int = QUIZ_SESSION_TTL_MINUTES, clock: Callable[[], datetime] = utcnow):
        self.ttl = timedelta(minutes=ttl_minutes)
        self.clock = clock
        self.sessions: Dict[str, LiveSession] = {}
        # (user_id, lesson_id) -> session_id; one live attempt per learner per lesson
        self.by_learner: Dict[Tuple[str, str], str] = {}

    def start(self, user_id: str, course_id: str, lesson_id: str, lesson_title: str, quiz: Quiz) -> LiveSession:
        quiz_session = QuizSession.start(quiz)
        self.purge_expired()

        previous = self.by_learner.get((user_id, lesson_id))
        if previous:
            self.discard(previous)
            logger.info("Replaced quiz session %s for user %s on lesson %s", previous, user_id, lesson_id)

        now = self.clock()
        live = LiveSession(
            session_id=generate_id("QS"),
            user_id=user_id,
            course_id=course_id,
            lesson_id=lesson_id,
            lesson_title=lesson_title,
            quiz_session=quiz_session,
            created_at=now,
            last_active_at=now
        )
        self.sessions[live.session_id] = live
        self.by_learner[(user_id, lesson_id)] = live.session_id
        return live

    def get(self, session_id: str, user_id: str) -> LiveSession:
        self.purge_expired()
        live = self.sessions.get(session_id)
        if live is None:
            raise NotFoundError("Quiz session not found")
        if live.user_id != user_id:
            raise AccessDeniedError("This quiz session belongs to another learner.")
        live.last_active_at = self.clock()
        return live

    def discard(self, session_id: str) -> Optional[LiveSession]:
        live = self.sessions.pop(session_id, None)
        if live and self.by_learner.get((live.user_id, live.lesson_id)) == session_id:
            del self.by_learner[(live.user_id, live.lesson_id)]
        return live

    def purge_expired(self) -> int:
        """Drop sessions idle for longer than the TTL"""
        cutoff = self.clock() - self.ttl
        expired = [sid for sid, live in self.sessions.items() if live.last_active_at <= cutoff]
        for session_id in expired:
            self.discard(session_id)
        if expired:
            logger.info("Purged %d idle quiz sessions", len(expired))
        return len(expired)

    def __len__(self):
        return len(self.sessions)
