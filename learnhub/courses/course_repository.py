"""
Course record store

Flat records keyed by course id. Two backends share one async surface:
an in-process dict (default, and what tests use) and a MongoDB collection
through motor. No relational integrity and no transactions.
"""

import copy
import logging
from typing import Dict, List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from learnhub.courses.course_models import Course

logger = logging.getLogger(__name__)


class CourseRepository:
    """Minimal persistence contract the catalog and the core rely on"""

    async def list_courses(self) -> List[Course]:
        raise NotImplementedError

    async def get_course(self, course_id: str) -> Optional[Course]:
        raise NotImplementedError

    async def create_course(self, course: Course) -> Course:
        raise NotImplementedError

    async def update_course(self, course_id: str, updates: dict) -> Optional[Course]:
        """Merge `updates` into the stored record; None when the id is unknown"""
        raise NotImplementedError

    async def delete_course(self, course_id: str) -> bool:
        raise NotImplementedError

    async def increment_enrolled(self, course_id: str) -> Optional[Course]:
        raise NotImplementedError

    async def count(self) -> int:
        raise NotImplementedError

    @property
    def backend(self) -> str:
        return type(self).__name__


class InMemoryCourseRepository(CourseRepository):

    def __init__(self):
        self._courses: Dict[str, dict] = {}

    async def list_courses(self) -> List[Course]:
        return [Course(**copy.deepcopy(doc)) for doc in self._courses.values()]

    async def get_course(self, course_id: str) -> Optional[Course]:
        doc = self._courses.get(course_id)
        return Course(**copy.deepcopy(doc)) if doc else None

    async def create_course(self, course: Course) -> Course:
        self._courses[course.id] = course.dict()
        return course

    async def update_course(self, course_id: str, updates: dict) -> Optional[Course]:
        doc = self._courses.get(course_id)
        if doc is None:
            return None
        merged = {**doc, **copy.deepcopy(updates), "id": course_id}
        # Validate before committing so a bad update leaves the record untouched
        course = Course(**merged)
        self._courses[course_id] = course.dict()
        return course

    async def delete_course(self, course_id: str) -> bool:
        return self._courses.pop(course_id, None) is not None

    async def increment_enrolled(self, course_id: str) -> Optional[Course]:
        doc = self._courses.get(course_id)
        if doc is None:
            return None
        doc["enrolled_count"] = doc.get("enrolled_count", 0) + 1
        return Course(**copy.deepcopy(doc))

    async def count(self) -> int:
        return len(self._courses)


class MongoCourseRepository(CourseRepository):

    def __init__(self, db: AsyncIOMotorDatabase):
        self.collection = db.courses

    async def create_indexes(self):
        await self.collection.create_index("id", unique=True)
        await self.collection.create_index("category")

    async def list_courses(self) -> List[Course]:
        cursor = self.collection.find({}, {"_id": 0})
        docs = await cursor.to_list(length=None)
        return [Course(**doc) for doc in docs]

    async def get_course(self, course_id: str) -> Optional[Course]:
        doc = await self.collection.find_one({"id": course_id}, {"_id": 0})
        return Course(**doc) if doc else None

    async def create_course(self, course: Course) -> Course:
        await self.collection.insert_one(course.dict())
        return course

    async def update_course(self, course_id: str, updates: dict) -> Optional[Course]:
        current = await self.get_course(course_id)
        if current is None:
            return None
        course = Course(**{**current.dict(), **updates, "id": course_id})
        result = await self.collection.update_one(
            {"id": course_id},
            {"$set": {key: course.dict()[key] for key in updates if key != "id"}}
        )
        if result.matched_count == 0:
            return None
        return course

    async def delete_course(self, course_id: str) -> bool:
        result = await self.collection.delete_one({"id": course_id})
        return result.deleted_count > 0

    async def increment_enrolled(self, course_id: str) -> Optional[Course]:
        result = await self.collection.update_one(
            {"id": course_id},
            {"$inc": {"enrolled_count": 1}}
        )
        if result.matched_count == 0:
            return None
        return await self.get_course(course_id)

    async def count(self) -> int:
        return await self.collection.count_documents({})
