from motor.motor_asyncio import AsyncIOMotorDatabase
from datetime import datetime
from typing import List, Optional, Iterable
import logging
import uuid

logger = logging.getLogger("quizzes")


def generate_id(prefix: str) -> str:
    """Generate unique ID with prefix"""
    return f"{prefix}_{uuid.uuid4().hex[:12].upper()}"


def strip_mongo_id(doc: Optional[dict]) -> Optional[dict]:
    if doc is not None:
        doc.pop("_id", None)
    return doc

# ==================== INDEXES ====================

async def create_quiz_indexes(db: AsyncIOMotorDatabase):
    """
    Create MongoDB indexes for the quiz system
    Called during application startup
    """
    # Quizzes
    await db.quizzes.create_index("quiz_id", unique=True)
    await db.quizzes.create_index([("course_id", 1), ("created_at", 1)])

    # Quiz submissions
    # One submission per (quiz, student, course): this is what stops duplicate submits
    await db.quiz_submissions.create_index("submission_id", unique=True)
    await db.quiz_submissions.create_index(
        [("quiz_id", 1), ("student_id", 1), ("course_id", 1)],
        unique=True
    )
    await db.quiz_submissions.create_index([("course_id", 1), ("student_id", 1)])
    await db.quiz_submissions.create_index("submitted_at")

    logger.info("Quiz system indexes created")

# ==================== COLLABORATOR LOOKUPS ====================

async def get_course(db: AsyncIOMotorDatabase, course_id: str) -> Optional[dict]:
    """Get course by ID"""
    return await db.courses.find_one({"course_id": course_id})


async def get_active_enrollment(db: AsyncIOMotorDatabase, course_id: str, user_id: str) -> Optional[dict]:
    return await db.course_enrollments.find_one({
        "course_id": course_id,
        "user_id": user_id,
        "is_active": True
    })


async def get_user_profiles(db: AsyncIOMotorDatabase, user_ids: Iterable[str]) -> dict:
    """Batch lookup of user identities, keyed by user_id"""
    ids = list(set(user_ids))
    if not ids:
        return {}
    cursor = db.users_profile.find({"user_id": {"$in": ids}})
    profiles = await cursor.to_list(length=None)
    return {p["user_id"]: p for p in profiles}

# ==================== QUIZ CRUD ====================

async def insert_quiz(db: AsyncIOMotorDatabase, course_id: str, lesson_id: str, title: str, questions: List[dict]) -> dict:
    now = datetime.utcnow()
    quiz = {
        "quiz_id": generate_id("QUIZ"),
        "course_id": course_id,
        "lesson_id": lesson_id,
        "title": title,
        "questions": questions,
        "created_at": now,
        "updated_at": now
    }
    await db.quizzes.insert_one(quiz)
    return strip_mongo_id(quiz)


async def get_quiz(db: AsyncIOMotorDatabase, quiz_id: str) -> Optional[dict]:
    return strip_mongo_id(await db.quizzes.find_one({"quiz_id": quiz_id}))


async def get_quizzes_by_ids(db: AsyncIOMotorDatabase, quiz_ids: Iterable[str]) -> dict:
    """Batch lookup of quizzes, keyed by quiz_id. Deleted quizzes are simply absent."""
    ids = list(set(quiz_ids))
    if not ids:
        return {}
    cursor = db.quizzes.find({"quiz_id": {"$in": ids}})
    quizzes = await cursor.to_list(length=None)
    return {q["quiz_id"]: strip_mongo_id(q) for q in quizzes}


async def list_course_quizzes(db: AsyncIOMotorDatabase, course_id: str) -> List[dict]:
    cursor = db.quizzes.find({"course_id": course_id}).sort("created_at", 1)
    quizzes = await cursor.to_list(length=None)
    return [strip_mongo_id(q) for q in quizzes]


async def update_quiz_fields(db: AsyncIOMotorDatabase, quiz_id: str, updates: dict) -> Optional[dict]:
    """Apply updates, return the updated quiz or None if it does not exist"""
    updates["updated_at"] = datetime.utcnow()
    result = await db.quizzes.update_one({"quiz_id": quiz_id}, {"$set": updates})
    if result.matched_count == 0:
        return None
    return await get_quiz(db, quiz_id)


async def delete_quiz_doc(db: AsyncIOMotorDatabase, quiz_id: str) -> bool:
    """Remove the quiz only; its submissions stay"""
    result = await db.quizzes.delete_one({"quiz_id": quiz_id})
    return result.deleted_count > 0

# ==================== SUBMISSIONS ====================

async def find_submission(db: AsyncIOMotorDatabase, quiz_id: str, student_id: str, course_id: str = None) -> Optional[dict]:
    query = {"quiz_id": quiz_id, "student_id": student_id}
    if course_id is not None:
        query["course_id"] = course_id
    return strip_mongo_id(await db.quiz_submissions.find_one(query))


async def quiz_has_submissions(db: AsyncIOMotorDatabase, quiz_id: str) -> bool:
    return await db.quiz_submissions.find_one({"quiz_id": quiz_id}) is not None


async def insert_submission(
    db: AsyncIOMotorDatabase,
    quiz_id: str,
    student_id: str,
    course_id: str,
    selected_options: List[int],
    score: int
) -> dict:
    """
    Insert a submission
    Raises pymongo DuplicateKeyError if the (quiz, student, course) pair exists
    """
    submission = {
        "submission_id": generate_id("QSUB"),
        "quiz_id": quiz_id,
        "student_id": student_id,
        "course_id": course_id,
        "selected_options": list(selected_options),
        "score": score,
        "submitted_at": datetime.utcnow()
    }
    await db.quiz_submissions.insert_one(submission)
    return strip_mongo_id(submission)


async def list_student_course_submissions(db: AsyncIOMotorDatabase, student_id: str, course_id: str) -> List[dict]:
    cursor = db.quiz_submissions.find({
        "course_id": course_id,
        "student_id": student_id
    }).sort("submitted_at", -1)
    submissions = await cursor.to_list(length=None)
    return [strip_mongo_id(s) for s in submissions]


async def list_submissions_for_quizzes(db: AsyncIOMotorDatabase, quiz_ids: Iterable[str], student_id: str = None) -> List[dict]:
    """All submissions for the given quizzes in one query, optionally for one student"""
    ids = list(set(quiz_ids))
    if not ids:
        return []
    query = {"quiz_id": {"$in": ids}}
    if student_id is not None:
        query["student_id"] = student_id
    cursor = db.quiz_submissions.find(query).sort("submitted_at", 1)
    submissions = await cursor.to_list(length=None)
    return [strip_mongo_id(s) for s in submissions]
