"""
One-time login codes

Ephemeral map of email -> (code, expiry, pending sign-up details). One active
code per email: issuing again supersedes the previous code. A code is valid
only for an exact match before its expiry and is consumed by a successful
verification, which hands back the name and role captured when it was issued.

NOTE: when mail delivery is off or fails, demo mode hands the code straight
back to whoever asked for it, so this is not an authentication boundary.
"""

import hmac
import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Dict, Optional

from learnhub.auth.auth_models import UserRole
from learnhub.config import OTP_LENGTH, OTP_TTL_MINUTES
from learnhub.utils import utcnow

logger = logging.getLogger(__name__)


@dataclass
class IssuedCode:
    code: str
    expires_at: datetime
    name: Optional[str] = None
    role: Optional[UserRole] = None


class OneTimeCodeStore:

    def __init__(self, ttl_minutes: int = OTP_TTL_MINUTES, clock: Callable[[], datetime] = utcnow):
        self.ttl = timedelta(minutes=ttl_minutes)
        self.clock = clock
        self._codes: Dict[str, IssuedCode] = {}

    @staticmethod
    def _normalize(email: str) -> str:
        return email.strip().lower()

    @staticmethod
    def generate_code() -> str:
        # 100000-999999: always six digits, never a leading zero
        return str(secrets.randbelow(9 * 10 ** (OTP_LENGTH - 1)) + 10 ** (OTP_LENGTH - 1))

    def issue(self, email: str, name: Optional[str] = None, role: Optional[UserRole] = None) -> IssuedCode:
        issued = IssuedCode(
            code=self.generate_code(),
            expires_at=self.clock() + self.ttl,
            name=(name or "").strip() or None,
            role=role
        )
        key = self._normalize(email)
        if key in self._codes:
            logger.info("Superseding unconsumed login code for %s", key)
        self._codes[key] = issued
        return issued

    def verify(self, email: str, code: str) -> Optional[IssuedCode]:
        """The consumed code with its pending details, or None"""
        key = self._normalize(email)
        issued = self._codes.get(key)
        if issued is None:
            return None
        if self.clock() >= issued.expires_at:
            del self._codes[key]
            return None
        if not hmac.compare_digest(issued.code, code.strip()):
            return None
        del self._codes[key]
        return issued

    def active_code(self, email: str) -> Optional[IssuedCode]:
        issued = self._codes.get(self._normalize(email))
        if issued and self.clock() < issued.expires_at:
            return issued
        return None

    def purge_expired(self) -> int:
        now = self.clock()
        expired = [k for k, v in self._codes.items() if now >= v.expires_at]
        for key in expired:
            del self._codes[key]
        return len(expired)
