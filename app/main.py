import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from motor.motor_asyncio import AsyncIOMotorClient

from app.logging_config import setup_logging
from app.quizzes import config
from app.quizzes.app import setup_quiz_routes, startup_quiz_system
from app.quizzes.errors import register_exception_handlers

setup_logging()

app = FastAPI(title="LMS Quiz Service")

# MongoDB Configuration
client = AsyncIOMotorClient(config.MONGO_URL)
db = client[config.MONGO_DB_NAME]


@app.on_event("startup")
async def startup_event():
    await startup_quiz_system(db)


@app.on_event("shutdown")
async def shutdown_event():
    client.close()


app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# ==================== ROUTER REGISTRATION ====================
setup_quiz_routes(app)
# ============================================================


@app.get("/health")
async def health():
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "8000")))
