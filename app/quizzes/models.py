from pydantic import BaseModel, Field, StrictInt, validator
from typing import List, Optional
from datetime import datetime

# ==================== REQUEST MODELS ====================

class QuestionCreate(BaseModel):
    """
    Question as authored by an admin
    correct_option_index must point into options (checked by the service)
    """
    question_text: str = Field(..., min_length=5)
    options: List[str] = Field(..., min_length=2)
    correct_option_index: StrictInt = Field(..., ge=0)

    @validator('question_text', pre=True)
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v

    @validator('options', pre=True)
    def strip_options(cls, v):
        if isinstance(v, list):
            return [o.strip() if isinstance(o, str) else o for o in v]
        return v


class QuizCreate(BaseModel):
    course_id: str = Field(..., min_length=1)
    lesson_id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=3, max_length=200)
    questions: List[QuestionCreate] = Field(..., min_length=1)

    @validator('title', pre=True)
    def strip_title(cls, v):
        return v.strip() if isinstance(v, str) else v


class QuizUpdate(BaseModel):
    course_id: Optional[str] = Field(None, min_length=1)
    lesson_id: Optional[str] = Field(None, min_length=1)
    title: Optional[str] = Field(None, min_length=3, max_length=200)
    questions: Optional[List[QuestionCreate]] = Field(None, min_length=1)

    @validator('title', pre=True)
    def strip_title(cls, v):
        return v.strip() if isinstance(v, str) else v


class QuizSubmit(BaseModel):
    selected_options: List[StrictInt]

    @validator('selected_options')
    def non_negative(cls, v):
        if any(option < 0 for option in v):
            raise ValueError('Selected option index must be >= 0')
        return v

# ==================== OUTPUT MODELS ====================

class PublicQuestion(BaseModel):
    """
    Question as shown before submission
    Has NO correct_option_index field
    """
    question_text: str
    options: List[str]


class AuthoredQuestion(PublicQuestion):
    """
    Question as stored; only for admins and post-submission review
    """
    correct_option_index: int


class PublicQuiz(BaseModel):
    quiz_id: str
    course_id: str
    lesson_id: str
    title: str
    questions: List[PublicQuestion]


class AuthoredQuiz(BaseModel):
    quiz_id: str
    course_id: str
    lesson_id: str
    title: str
    questions: List[AuthoredQuestion]
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class SubmissionSummary(BaseModel):
    """
    Listing view of a student's own submission
    Never carries raw answers
    """
    submission_id: str
    score: int
    correct_answers: int
    total_questions: int
    submitted_at: datetime


class QuestionReview(BaseModel):
    question_text: str
    options: List[str]
    correct_option_index: int
    selected_option: Optional[int] = None
    is_correct: bool

# ==================== MAPPERS ====================

def to_public_question(question: dict) -> PublicQuestion:
    return PublicQuestion(
        question_text=question["question_text"],
        options=list(question["options"]),
    )


def to_authored_question(question: dict) -> AuthoredQuestion:
    return AuthoredQuestion(
        question_text=question["question_text"],
        options=list(question["options"]),
        correct_option_index=question["correct_option_index"],
    )


def to_public_quiz(quiz: dict) -> PublicQuiz:
    return PublicQuiz(
        quiz_id=quiz["quiz_id"],
        course_id=quiz["course_id"],
        lesson_id=quiz["lesson_id"],
        title=quiz["title"],
        questions=[to_public_question(q) for q in quiz["questions"]],
    )


def to_authored_quiz(quiz: dict) -> AuthoredQuiz:
    return AuthoredQuiz(
        quiz_id=quiz["quiz_id"],
        course_id=quiz["course_id"],
        lesson_id=quiz["lesson_id"],
        title=quiz["title"],
        questions=[to_authored_question(q) for q in quiz["questions"]],
        created_at=quiz.get("created_at"),
        updated_at=quiz.get("updated_at"),
    )
