from pydantic import BaseModel, Field, validator
from typing import List, Optional
from enum import Enum

from learnhub.config import DEFAULT_PASS_MARK

# ==================== ENUMS ====================

class LessonType(str, Enum):
    VIDEO = "video"
    PDF = "pdf"
    TEXT = "text"
    QUIZ = "quiz"

# ==================== STORED MODELS ====================

class Question(BaseModel):
    id: str
    text: str
    options: List[str]
    correct_option_index: int
    explanation: Optional[str] = None

    @validator("options")
    def validate_options(cls, v):
        if len(v) < 2:
            raise ValueError("A question needs at least two options")
        return v

    @validator("correct_option_index")
    def validate_correct_option(cls, v, values):
        options = values.get("options")
        if options is not None and not 0 <= v < len(options):
            raise ValueError(f"correct_option_index must be between 0 and {len(options) - 1}")
        return v


class Quiz(BaseModel):
    """
    Owned by exactly one quiz lesson.
    An empty question list is storable but cannot be started.
    """
    id: str
    is_graded: bool = True
    pass_mark: float = Field(DEFAULT_PASS_MARK, ge=0, le=1)
    questions: List[Question] = []

    @validator("questions")
    def validate_unique_question_ids(cls, v):
        ids = [q.id for q in v]
        if len(set(ids)) != len(ids):
            raise ValueError("Question ids must be unique within a quiz")
        return v

    def find_question(self, question_id: str) -> Optional[Question]:
        for question in self.questions:
            if question.id == question_id:
                return question
        return None


class Lesson(BaseModel):
    id: str
    title: str
    type: LessonType = LessonType.TEXT
    content: str = ""
    url: Optional[str] = None
    quiz: Optional[Quiz] = None


class Course(BaseModel):
    id: str
    title: str
    description: str = ""
    instructor: str = ""
    category: str = ""
    thumbnail: str = ""
    enrolled_count: int = 0
    lessons: List[Lesson] = []

    def lesson_ids(self) -> List[str]:
        return [lesson.id for lesson in self.lessons]

    def find_lesson(self, lesson_id: str) -> Optional[Lesson]:
        for lesson in self.lessons:
            if lesson.id == lesson_id:
                return lesson
        return None

    def lesson_index(self, lesson_id: str) -> int:
        """Position of the lesson in the curriculum, -1 when absent"""
        for idx, lesson in enumerate(self.lessons):
            if lesson.id == lesson_id:
                return idx
        return -1

# ==================== REQUEST MODELS ====================

class QuestionCreate(BaseModel):
    id: Optional[str] = None
    text: str
    options: List[str]
    correct_option_index: int = 0
    explanation: Optional[str] = None

    @validator("options")
    def validate_options(cls, v):
        if len(v) < 2:
            raise ValueError("A question needs at least two options")
        return v

    @validator("correct_option_index")
    def validate_correct_option(cls, v, values):
        options = values.get("options")
        if options is not None and not 0 <= v < len(options):
            raise ValueError(f"correct_option_index must be between 0 and {len(options) - 1}")
        return v


class QuizCreate(BaseModel):
    is_graded: bool = True
    pass_mark: float = Field(DEFAULT_PASS_MARK, ge=0, le=1)
    questions: List[QuestionCreate] = []


class LessonCreate(BaseModel):
    title: str = ""
    type: LessonType = LessonType.TEXT
    content: str = ""
    url: Optional[str] = None
    quiz: Optional[QuizCreate] = None


class CourseCreate(BaseModel):
    title: str = ""
    description: str = ""
    instructor: str = ""
    category: str = ""
    thumbnail: str = ""
    lessons: List[LessonCreate] = []


class CourseUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    instructor: Optional[str] = None
    category: Optional[str] = None
    thumbnail: Optional[str] = None

# ==================== RESPONSE MODELS ====================

class PublicQuestion(BaseModel):
    """Question as shown to a learner: no answer key"""
    id: str
    text: str
    options: List[str]


class PublicQuiz(BaseModel):
    id: str
    is_graded: bool
    pass_mark: float
    questions: List[PublicQuestion]


class PublicLesson(BaseModel):
    id: str
    title: str
    type: LessonType
    content: str
    url: Optional[str] = None
    quiz: Optional[PublicQuiz] = None
