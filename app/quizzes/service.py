"""
Quiz service
Authoring, redacted presentation, one-shot submission with grading,
post-submission review and the admin reporting view.
"""

from typing import List, Optional
import logging

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError

from app.quizzes import database as store
from app.quizzes.errors import BadRequestError, NotFoundError, ConflictError
from app.quizzes.grading import validate_questions, answer_breakdown, grade_answers, compute_score
from app.quizzes.models import (
    QuestionReview, SubmissionSummary, to_public_quiz, to_authored_quiz
)
from app.quizzes.permissions import UserContext, verify_enrollment

logger = logging.getLogger("quizzes")

QUIZ_FIELDS = ("course_id", "lesson_id", "title", "questions")


def _normalize_questions(questions: List[dict]) -> List[dict]:
    """Keep only the stored question fields, in order"""
    validate_questions(questions)
    return [
        {
            "question_text": q["question_text"].strip(),
            "options": list(q["options"]),
            "correct_option_index": q["correct_option_index"],
        }
        for q in questions
    ]


def _require_text(name: str, value) -> str:
    if not isinstance(value, str) or not value.strip():
        raise BadRequestError(f"{name} is required")
    return value.strip()


async def _require_course(db: AsyncIOMotorDatabase, course_id: str) -> dict:
    course = await store.get_course(db, course_id)
    if not course:
        raise NotFoundError("Course not found")
    return course


def _review(quiz: dict, selected_options: List[int]) -> dict:
    """Recompute correctness of stored answers against the current quiz"""
    questions = quiz["questions"]
    results = answer_breakdown(questions, selected_options)
    breakdown = []
    for i, (question, is_correct) in enumerate(zip(questions, results)):
        breakdown.append(QuestionReview(
            question_text=question["question_text"],
            options=list(question["options"]),
            correct_option_index=question["correct_option_index"],
            selected_option=selected_options[i] if i < len(selected_options) else None,
            is_correct=is_correct,
        ).dict())
    return {
        "correct_answers": sum(results),
        "total_questions": len(questions),
        "questions": breakdown,
    }

# ==================== QUIZ DEFINITION MANAGEMENT ====================

async def create_quiz(
    db: AsyncIOMotorDatabase,
    course_id: str,
    lesson_id: str,
    title: str,
    questions: List[dict]
) -> dict:
    """
    Create quiz for a course lesson
    Returns the authored quiz (correct answers included, admin only)
    """
    course_id = _require_text("course_id", course_id)
    lesson_id = _require_text("lesson_id", lesson_id)
    title = _require_text("title", title)
    normalized = _normalize_questions(questions)

    await _require_course(db, course_id)

    quiz = await store.insert_quiz(db, course_id, lesson_id, title, normalized)
    logger.info("Quiz %s created for course %s (%d questions)", quiz["quiz_id"], course_id, len(normalized))
    return to_authored_quiz(quiz).dict()


async def update_quiz(db: AsyncIOMotorDatabase, quiz_id: str, fields: dict) -> dict:
    """
    Merge provided fields into the quiz
    A replaced question set is validated like on create
    """
    updates = {k: v for k, v in (fields or {}).items() if k in QUIZ_FIELDS and v is not None}
    if not updates:
        raise BadRequestError("No fields provided to update")

    current = await store.get_quiz(db, quiz_id)
    if not current:
        raise NotFoundError("Quiz not found")

    for name in ("course_id", "lesson_id", "title"):
        if name in updates:
            updates[name] = _require_text(name, updates[name])
    if "questions" in updates:
        updates["questions"] = _normalize_questions(updates["questions"])
    if "course_id" in updates and updates["course_id"] != current["course_id"]:
        # Submissions are unique per (quiz, student, course); moving the quiz would reopen it
        if await store.quiz_has_submissions(db, quiz_id):
            raise ConflictError("Cannot move a quiz to another course once it has submissions")
        await _require_course(db, updates["course_id"])

    quiz = await store.update_quiz_fields(db, quiz_id, updates)
    if not quiz:
        # Deleted between the read and the write
        raise NotFoundError("Quiz not found")

    logger.info("Quiz %s updated (%s)", quiz_id, ", ".join(sorted(k for k in updates if k != "updated_at")))
    return to_authored_quiz(quiz).dict()


async def delete_quiz(db: AsyncIOMotorDatabase, quiz_id: str):
    """Delete quiz; existing submissions are left in place"""
    if not await store.delete_quiz_doc(db, quiz_id):
        raise NotFoundError("Quiz not found")
    logger.info("Quiz %s deleted", quiz_id)

# ==================== PRESENTATION ====================

async def get_quiz(db: AsyncIOMotorDatabase, quiz_id: str) -> dict:
    """Quiz without correct answers, for every caller"""
    quiz = await store.get_quiz(db, quiz_id)
    if not quiz:
        raise NotFoundError("Quiz not found")
    return to_public_quiz(quiz).dict()


async def get_quizzes_for_course(db: AsyncIOMotorDatabase, course_id: str, user: Optional[UserContext] = None) -> List[dict]:
    """
    Redacted quizzes of a course
    Students also get is_submitted and a summary of their own submission
    """
    await _require_course(db, course_id)
    quizzes = await store.list_course_quizzes(db, course_id)

    if not (user and user.is_student):
        return [to_public_quiz(q).dict() for q in quizzes]

    submissions = await store.list_submissions_for_quizzes(
        db, [q["quiz_id"] for q in quizzes], student_id=user.user_id
    )
    by_quiz = {s["quiz_id"]: s for s in submissions}

    results = []
    for quiz in quizzes:
        item = to_public_quiz(quiz).dict()
        submission = by_quiz.get(quiz["quiz_id"])
        item["is_submitted"] = submission is not None
        if submission:
            results_for_quiz = answer_breakdown(quiz["questions"], submission["selected_options"])
            item["submission"] = SubmissionSummary(
                submission_id=submission["submission_id"],
                score=submission["score"],
                correct_answers=sum(results_for_quiz),
                total_questions=len(quiz["questions"]),
                submitted_at=submission["submitted_at"],
            ).dict()
        else:
            item["submission"] = None
        results.append(item)
    return results

# ==================== SUBMISSION & GRADING ====================

async def submit_quiz(db: AsyncIOMotorDatabase, quiz_id: str, student_id: str, selected_options) -> dict:
    """
    Grade and record a student's one and only submission for a quiz

    Raises:
        400: selected_options missing/not an array, or answer count mismatch
        404: Quiz not found
        409: Already submitted
    """
    if selected_options is None or not isinstance(selected_options, (list, tuple)):
        raise BadRequestError("selected_options array is required")

    quiz = await store.get_quiz(db, quiz_id)
    if not quiz:
        raise NotFoundError("Quiz not found")

    questions = quiz["questions"]
    if len(selected_options) != len(questions):
        raise BadRequestError("Number of answers must match number of questions")

    correct_count = grade_answers(questions, selected_options)
    total_questions = len(questions)
    score = compute_score(correct_count, total_questions)

    course_id = quiz["course_id"]
    if await store.find_submission(db, quiz_id, student_id, course_id):
        logger.info("Duplicate submission rejected for quiz %s", quiz_id, extra={"user": student_id})
        raise ConflictError("Quiz already submitted. Cannot submit twice.")

    try:
        submission = await store.insert_submission(
            db, quiz_id, student_id, course_id, selected_options, score
        )
    except DuplicateKeyError:
        # Lost the race against a concurrent submit; the unique index decided
        logger.warning("Concurrent duplicate submission for quiz %s", quiz_id, extra={"user": student_id})
        raise ConflictError("Quiz already submitted")

    logger.info(
        "Quiz %s submitted: %d/%d correct, score %d",
        quiz_id, correct_count, total_questions, score,
        extra={"user": student_id}
    )
    return {
        "submission": submission,
        "score": score,
        "correct_answers": correct_count,
        "total_questions": total_questions,
    }

# ==================== SUBMISSION REVIEW ====================

async def get_quiz_submission(db: AsyncIOMotorDatabase, quiz_id: str, student_id: str) -> dict:
    """
    Student's own submission with answers revealed
    Only reachable once the student has submitted this quiz
    """
    submission = await store.find_submission(db, quiz_id, student_id)
    if not submission:
        raise NotFoundError("Submission not found")

    quiz = await store.get_quiz(db, quiz_id)
    if not quiz:
        raise NotFoundError("Quiz not found")

    review = _review(quiz, submission["selected_options"])
    return {
        "submission_id": submission["submission_id"],
        "quiz_id": quiz_id,
        "course_id": submission["course_id"],
        "lesson_id": quiz["lesson_id"],
        "title": quiz["title"],
        "score": submission["score"],
        "selected_options": submission["selected_options"],
        "submitted_at": submission["submitted_at"],
        **review,
    }


async def get_my_quiz_submissions(db: AsyncIOMotorDatabase, student_id: str, course_id: str) -> List[dict]:
    """
    All of a student's submissions in a course, newest first
    Requires an active enrollment; submissions of deleted quizzes are skipped
    """
    await verify_enrollment(db, course_id, student_id)

    submissions = await store.list_student_course_submissions(db, student_id, course_id)
    quizzes = await store.get_quizzes_by_ids(db, [s["quiz_id"] for s in submissions])

    results = []
    for submission in submissions:
        quiz = quizzes.get(submission["quiz_id"])
        if not quiz:
            logger.info("Skipping submission %s: quiz %s no longer exists",
                        submission["submission_id"], submission["quiz_id"], extra={"user": student_id})
            continue
        correct = answer_breakdown(quiz["questions"], submission["selected_options"])
        results.append({
            "submission_id": submission["submission_id"],
            "quiz_id": quiz["quiz_id"],
            "quiz_title": quiz["title"],
            "lesson_id": quiz["lesson_id"],
            "score": submission["score"],
            "correct_answers": sum(correct),
            "total_questions": len(quiz["questions"]),
            "submitted_at": submission["submitted_at"],
        })
    return results

# ==================== ADMIN AGGREGATE ====================

async def get_admin_quizzes_for_course(db: AsyncIOMotorDatabase, course_id: str) -> List[dict]:
    """
    Every quiz of the course with every submission, answers and students included
    Course check plus three batched reads: quizzes, submissions, user profiles
    """
    await _require_course(db, course_id)
    quizzes = await store.list_course_quizzes(db, course_id)
    submissions = await store.list_submissions_for_quizzes(db, [q["quiz_id"] for q in quizzes])
    profiles = await store.get_user_profiles(db, [s["student_id"] for s in submissions])

    by_quiz = {}
    for submission in submissions:
        by_quiz.setdefault(submission["quiz_id"], []).append(submission)

    results = []
    for quiz in quizzes:
        item = to_authored_quiz(quiz).dict()
        entries = []
        for submission in by_quiz.get(quiz["quiz_id"], []):
            profile = profiles.get(submission["student_id"]) or {}
            entries.append({
                "submission_id": submission["submission_id"],
                "student": {
                    "user_id": submission["student_id"],
                    "username": profile.get("username"),
                    "email": profile.get("email_id"),
                },
                "selected_options": submission["selected_options"],
                "score": submission["score"],
                "submitted_at": submission["submitted_at"],
                **_review(quiz, submission["selected_options"]),
            })
        item["submissions"] = entries
        results.append(item)
    return results
