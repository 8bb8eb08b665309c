"""
Quiz System - Setup
Router registration and startup hooks
"""

import logging

from fastapi import FastAPI
from motor.motor_asyncio import AsyncIOMotorDatabase

from app.quizzes.router import router as quiz_router
from app.quizzes.database import create_quiz_indexes

logger = logging.getLogger("quizzes")

# ==================== ROUTER SETUP ====================

def setup_quiz_routes(app: FastAPI):
    """Register all quiz-related routers"""
    app.include_router(quiz_router, prefix="/api")
    logger.info("Quiz routes registered")

# ==================== STARTUP ====================

async def startup_quiz_system(db: AsyncIOMotorDatabase):
    """Initialize quiz system on app startup"""
    await create_quiz_indexes(db)
    logger.info("Quiz system initialized")
