"""
Test fixtures: an in-memory stand-in for the motor database and
helpers to seed courses, enrollments, users and quizzes.
"""
import asyncio
import copy
from types import SimpleNamespace

from bson import ObjectId
from pymongo.errors import DuplicateKeyError


def _matches(doc: dict, query: dict) -> bool:
    for key, expected in query.items():
        value = doc.get(key)
        if isinstance(expected, dict) and "$in" in expected:
            if value not in expected["$in"]:
                return False
        elif value != expected:
            return False
    return True


class FakeCursor:
    def __init__(self, docs):
        self._docs = docs

    def sort(self, key, direction=1):
        self._docs.sort(key=lambda d: d.get(key), reverse=direction == -1)
        return self

    async def to_list(self, length=None):
        await asyncio.sleep(0)
        docs = self._docs if length is None else self._docs[:length]
        return [copy.deepcopy(d) for d in docs]


class FakeCollection:
    """
    Minimal async collection: equality and $in filters, unique indexes.
    Every call yields to the event loop so concurrent tasks interleave.
    """

    def __init__(self, name: str):
        self.name = name
        self.docs = []
        self.unique_keys = []
        self.find_calls = 0
        self.find_one_calls = 0

    async def create_index(self, keys, unique=False, **kwargs):
        if isinstance(keys, str):
            fields = (keys,)
        else:
            fields = tuple(k for k, _ in keys)
        if unique and fields not in self.unique_keys:
            self.unique_keys.append(fields)
        return "_".join(fields)

    async def insert_one(self, doc):
        await asyncio.sleep(0)
        for fields in self.unique_keys:
            key = tuple(doc.get(f) for f in fields)
            if any(tuple(d.get(f) for f in fields) == key for d in self.docs):
                raise DuplicateKeyError(
                    f"E11000 duplicate key error collection: {self.name}", code=11000
                )
        doc.setdefault("_id", ObjectId())
        self.docs.append(copy.deepcopy(doc))
        return SimpleNamespace(inserted_id=doc["_id"])

    async def find_one(self, query, *args, **kwargs):
        self.find_one_calls += 1
        await asyncio.sleep(0)
        for doc in self.docs:
            if _matches(doc, query):
                return copy.deepcopy(doc)
        return None

    def find(self, query=None, *args, **kwargs):
        self.find_calls += 1
        return FakeCursor([d for d in self.docs if _matches(d, query or {})])

    async def update_one(self, query, update):
        await asyncio.sleep(0)
        for doc in self.docs:
            if _matches(doc, query):
                doc.update(copy.deepcopy(update.get("$set", {})))
                return SimpleNamespace(matched_count=1, modified_count=1)
        return SimpleNamespace(matched_count=0, modified_count=0)

    async def delete_one(self, query):
        await asyncio.sleep(0)
        for i, doc in enumerate(self.docs):
            if _matches(doc, query):
                del self.docs[i]
                return SimpleNamespace(deleted_count=1)
        return SimpleNamespace(deleted_count=0)


class FakeDatabase:
    def __init__(self):
        self._collections = {}

    def __getattr__(self, name):
        if name.startswith("_"):
            raise AttributeError(name)
        return self[name]

    def __getitem__(self, name):
        if name not in self._collections:
            self._collections[name] = FakeCollection(name)
        return self._collections[name]


class QuizFixtures:
    """Seed helpers shared by the test modules"""

    COURSE_ID = "COURSE_A1B2C3D4E5F6"
    OTHER_COURSE_ID = "COURSE_000000000000"
    STUDENT_ID = "USER_STUDENT_1"
    OTHER_STUDENT_ID = "USER_STUDENT_2"
    ADMIN_ID = "USER_ADMIN_1"

    @staticmethod
    def question(text, options, correct):
        return {
            "question_text": text,
            "options": list(options),
            "correct_option_index": correct,
        }

    @classmethod
    def four_questions(cls):
        """Correct indices [1, 0, 2, 0]"""
        return [
            cls.question("What is 2 + 2?", ["3", "4", "5"], 1),
            cls.question("Capital of France?", ["Paris", "Rome"], 0),
            cls.question("Largest planet?", ["Mars", "Venus", "Jupiter"], 2),
            cls.question("Colour of the sky?", ["Blue", "Green"], 0),
        ]

    @classmethod
    def questions_with_correct(cls, correct_indices):
        return [
            cls.question(f"Question number {i + 1}?", ["A", "B", "C", "D"], c)
            for i, c in enumerate(correct_indices)
        ]

    @classmethod
    async def make_db(cls):
        from app.quizzes.database import create_quiz_indexes

        db = FakeDatabase()
        await create_quiz_indexes(db)
        await db.courses.insert_one({
            "course_id": cls.COURSE_ID,
            "title": "Intro to Python",
            "syllabus": [{"lesson_id": "L1", "title": "Basics"}],
        })
        await db.courses.insert_one({"course_id": cls.OTHER_COURSE_ID, "title": "Other"})
        await db.users_profile.insert_one({
            "user_id": cls.STUDENT_ID, "username": "alice", "email_id": "alice@example.com",
        })
        await db.users_profile.insert_one({
            "user_id": cls.OTHER_STUDENT_ID, "username": "bob", "email_id": "bob@example.com",
        })
        return db

    @classmethod
    async def enroll(cls, db, user_id, course_id=None, is_active=True):
        await db.course_enrollments.insert_one({
            "enrollment_id": f"ENR_{user_id}",
            "course_id": course_id or cls.COURSE_ID,
            "user_id": user_id,
            "is_active": is_active,
        })
