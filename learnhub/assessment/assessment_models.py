from pydantic import BaseModel, validator
from typing import Optional
from enum import Enum

# ==================== ENUMS ====================

class NavigationAction(str, Enum):
    GOTO = "goto"
    NEXT = "next"
    PREVIOUS = "previous"


class ViolationKind(str, Enum):
    """What the browser reported; all kinds count the same"""
    VISIBILITY_HIDDEN = "visibility_hidden"
    WINDOW_BLUR = "window_blur"

# ==================== REQUEST MODELS ====================

class StartQuizRequest(BaseModel):
    course_id: str
    lesson_id: str


class AnswerRequest(BaseModel):
    question_id: str
    option_index: int


class NavigateRequest(BaseModel):
    action: NavigationAction
    index: Optional[int] = None

    @validator("index", always=True)
    def validate_index(cls, v, values):
        if values.get("action") == NavigationAction.GOTO and v is None:
            raise ValueError("index is required for goto")
        return v


class ViolationRequest(BaseModel):
    kind: ViolationKind = ViolationKind.VISIBILITY_HIDDEN
