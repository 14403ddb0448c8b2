import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from labrecord_backend.api.api_builder import CrudRouter
from labrecord_backend.api.dashboard import dashboard_router
from labrecord_backend.api.evaluations import evaluation_router
from labrecord_backend.api.execution import execution_router
from labrecord_backend.api.hooks import hooks_router
from labrecord_backend.api.submissions import experiment_submission_router, submissions_router
from labrecord_backend.database import _SessionLocal, upgrade_database
from labrecord_backend.interface.assignments import AssignmentInterface
from labrecord_backend.interface.enrollments import EnrollmentInterface
from labrecord_backend.interface.evaluations import EvaluationInterface
from labrecord_backend.interface.experiments import ExperimentInterface
from labrecord_backend.interface.profiles import ProfileInterface
from labrecord_backend.interface.subjects import SubjectInterface
from labrecord_backend.interface.submissions import SubmissionInterface
from labrecord_backend.model.seeder import seed_subjects
from labrecord_backend.settings import settings

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)

logger = logging.getLogger(__name__)

def startup_logic():

    upgrade_database()

    with _SessionLocal() as db:
        seed_subjects(db)

@asynccontextmanager
async def lifespan(app: FastAPI):

    if settings.DEBUG_MODE == "production":
        startup_logic()
    else:
        logger.info("Development mode: skipping migrations and seeding")

    yield

app = FastAPI(lifespan=lifespan)

origins = [
    "*"
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Total-Count"],
)

CrudRouter(ProfileInterface).register_routes(app, delete=False)
CrudRouter(SubjectInterface).register_routes(app)
CrudRouter(ExperimentInterface).register_routes(app)
CrudRouter(EnrollmentInterface).register_routes(app)
CrudRouter(AssignmentInterface).register_routes(app)
# Submissions and evaluations are written through the workflow routes below
CrudRouter(SubmissionInterface).register_routes(app, create=False, update=False, delete=False)
CrudRouter(EvaluationInterface).register_routes(app, delete=False)

app.include_router(
    submissions_router,
    prefix="/submissions",
    tags=["submissions"]
)

app.include_router(
    evaluation_router,
    prefix="/submissions",
    tags=["evaluations"]
)

app.include_router(
    experiment_submission_router,
    prefix="/experiments",
    tags=["experiments", "submissions"]
)

app.include_router(
    dashboard_router,
    prefix="/dashboard",
    tags=["dashboard"]
)

app.include_router(
    execution_router,
    prefix="/execute",
    tags=["execution"]
)

app.include_router(
    hooks_router,
    prefix="/hooks",
    tags=["hooks"]
)

@app.head("/health", status_code=204)
@app.get("/health")
def get_status():
    return {"status": "ok"}
