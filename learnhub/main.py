import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from learnhub import database
from learnhub.config import CORS_ORIGINS, LOG_LEVEL, PORT, SEED_SAMPLE_COURSES, VERSION
from learnhub.errors import register_error_handlers
from learnhub.assessment.assessment_router import router as assessment_router
from learnhub.auth.auth_router import router as auth_router
from learnhub.courses.course_router import router as course_router
from learnhub.courses.seed import ensure_seed_data
from learnhub.enrollments.enrollment_router import router as enrollment_router
from learnhub.system.health_router import router as health_router

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
)
logger = logging.getLogger(__name__)

app = FastAPI(title="LearnHub LMS API", version=VERSION)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)


@app.on_event("startup")
async def startup_event():
    await database.create_indexes()
    if SEED_SAMPLE_COURSES:
        await ensure_seed_data(database.course_repository)
    logger.info("LearnHub %s started with %s", VERSION, database.course_repository.backend)


# ==================== ROUTER REGISTRATION ====================
app.include_router(auth_router)
app.include_router(course_router)
app.include_router(enrollment_router)
app.include_router(assessment_router)
app.include_router(health_router)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=PORT)
