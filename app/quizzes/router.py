from fastapi import APIRouter, Depends
from motor.motor_asyncio import AsyncIOMotorDatabase

from app.quizzes.models import QuizCreate, QuizUpdate, QuizSubmit
from app.quizzes.permissions import (
    get_current_user,
    require_admin,
    require_student,
    UserContext
)
from app.quizzes.dependencies import get_db
from app.quizzes import service

router = APIRouter(tags=["Quizzes"])


def success(message: str, data=None) -> dict:
    return {"status": "success", "message": message, "data": data}

# ==================== ADMIN: QUIZ MANAGEMENT ====================

@router.post("/admin/quizzes", status_code=201)
async def create_quiz(
    payload: QuizCreate,
    db: AsyncIOMotorDatabase = Depends(get_db),
    admin: UserContext = Depends(require_admin)
):
    """
    Create a quiz for a course lesson
    Response includes correct answers (admin only)
    """
    quiz = await service.create_quiz(
        db,
        payload.course_id,
        payload.lesson_id,
        payload.title,
        [q.dict() for q in payload.questions]
    )
    return success("Quiz created successfully", quiz)


@router.put("/admin/quizzes/{quiz_id}")
async def update_quiz(
    quiz_id: str,
    payload: QuizUpdate,
    db: AsyncIOMotorDatabase = Depends(get_db),
    admin: UserContext = Depends(require_admin)
):
    quiz = await service.update_quiz(db, quiz_id, payload.dict(exclude_none=True))
    return success("Quiz updated successfully", quiz)


@router.delete("/admin/quizzes/{quiz_id}")
async def delete_quiz(
    quiz_id: str,
    db: AsyncIOMotorDatabase = Depends(get_db),
    admin: UserContext = Depends(require_admin)
):
    """
    Delete a quiz
    Existing submissions are not removed
    """
    await service.delete_quiz(db, quiz_id)
    return success("Quiz deleted successfully")


@router.get("/admin/courses/{course_id}/quizzes")
async def get_admin_quizzes_for_course(
    course_id: str,
    db: AsyncIOMotorDatabase = Depends(get_db),
    admin: UserContext = Depends(require_admin)
):
    """
    All quizzes of a course with every student's submission
    """
    quizzes = await service.get_admin_quizzes_for_course(db, course_id)
    return success("Quizzes fetched successfully", quizzes)

# ==================== STUDENT: QUIZ FLOW ====================

@router.get("/quizzes/{quiz_id}")
async def get_quiz(
    quiz_id: str,
    db: AsyncIOMotorDatabase = Depends(get_db),
    user: UserContext = Depends(get_current_user)
):
    """
    Quiz questions without correct answers
    """
    quiz = await service.get_quiz(db, quiz_id)
    return success("Quiz fetched successfully", quiz)


@router.post("/quizzes/{quiz_id}/submit", status_code=201)
async def submit_quiz(
    quiz_id: str,
    payload: QuizSubmit,
    db: AsyncIOMotorDatabase = Depends(get_db),
    student: UserContext = Depends(require_student)
):
    """
    Submit answers once; returns the score

    - Answer count must match question count (400)
    - Second submission for the same quiz is rejected (409)
    """
    result = await service.submit_quiz(db, quiz_id, student.user_id, payload.selected_options)
    return success("Quiz submitted successfully", result)


@router.get("/quizzes/{quiz_id}/submission")
async def get_quiz_submission(
    quiz_id: str,
    db: AsyncIOMotorDatabase = Depends(get_db),
    student: UserContext = Depends(require_student)
):
    """
    Own submission with correct answers and per-question result
    """
    submission = await service.get_quiz_submission(db, quiz_id, student.user_id)
    return success("Submission fetched successfully", submission)


@router.get("/courses/{course_id}/quizzes")
async def get_quizzes_for_course(
    course_id: str,
    db: AsyncIOMotorDatabase = Depends(get_db),
    user: UserContext = Depends(get_current_user)
):
    quizzes = await service.get_quizzes_for_course(db, course_id, user)
    return success("Quizzes fetched successfully", quizzes)


@router.get("/courses/{course_id}/submissions")
async def get_my_quiz_submissions(
    course_id: str,
    db: AsyncIOMotorDatabase = Depends(get_db),
    student: UserContext = Depends(require_student)
):
    """
    Own quiz submissions in a course (requires active enrollment)
    """
    submissions = await service.get_my_quiz_submissions(db, student.user_id, course_id)
    return success("Submissions fetched successfully", submissions)
