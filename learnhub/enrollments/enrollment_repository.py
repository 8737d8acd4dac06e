import copy
from typing import Dict, List, Optional, Tuple

from motor.motor_asyncio import AsyncIOMotorDatabase

from learnhub.enrollments.progress_reducer import Enrollment


class EnrollmentRepository:
    """Enrollment records keyed by (user_id, course_id)"""

    async def get(self, user_id: str, course_id: str) -> Optional[Enrollment]:
        raise NotImplementedError

    async def save(self, enrollment: Enrollment) -> Enrollment:
        raise NotImplementedError

    async def list_for_user(self, user_id: str) -> List[Enrollment]:
        raise NotImplementedError


class InMemoryEnrollmentRepository(EnrollmentRepository):

    def __init__(self):
        self._records: Dict[Tuple[str, str], dict] = {}

    async def get(self, user_id: str, course_id: str) -> Optional[Enrollment]:
        doc = self._records.get((user_id, course_id))
        return Enrollment(**copy.deepcopy(doc)) if doc else None

    async def save(self, enrollment: Enrollment) -> Enrollment:
        self._records[enrollment.key] = enrollment.dict()
        return enrollment

    async def list_for_user(self, user_id: str) -> List[Enrollment]:
        return [
            Enrollment(**copy.deepcopy(doc))
            for (uid, _), doc in self._records.items()
            if uid == user_id
        ]

    def __len__(self):
        return len(self._records)


class MongoEnrollmentRepository(EnrollmentRepository):

    def __init__(self, db: AsyncIOMotorDatabase):
        self.collection = db.course_enrollments

    async def create_indexes(self):
        await self.collection.create_index([("user_id", 1), ("course_id", 1)], unique=True)

    async def get(self, user_id: str, course_id: str) -> Optional[Enrollment]:
        doc = await self.collection.find_one(
            {"user_id": user_id, "course_id": course_id},
            {"_id": 0}
        )
        return Enrollment(**doc) if doc else None

    async def save(self, enrollment: Enrollment) -> Enrollment:
        await self.collection.update_one(
            {"user_id": enrollment.user_id, "course_id": enrollment.course_id},
            {"$set": enrollment.dict()},
            upsert=True
        )
        return enrollment

    async def list_for_user(self, user_id: str) -> List[Enrollment]:
        cursor = self.collection.find({"user_id": user_id}, {"_id": 0})
        docs = await cursor.to_list(length=None)
        return [Enrollment(**doc) for doc in docs]
