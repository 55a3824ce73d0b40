from logging_config import setup_logging

# Initialize logging BEFORE anything else
setup_logging()

from datetime import datetime
from logging_config import get_logger
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError
from middleware import RequestLifecycleMiddleware
from routes import auth, departments, notifications, project_vendors, projects, tasks, users
from database import db
from errors import TaskDeskError
from config import config

logger = get_logger("app")

app = FastAPI(title="TaskDesk API")

# CORS remains here as it's a global setting
app.add_middleware(
    CORSMiddleware,
    allow_origins=[config.FRONTEND_URL] if config.ENV == "production" else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Request lifecycle middleware (request ID, context vars, duration logging)
app.add_middleware(RequestLifecycleMiddleware)


@app.exception_handler(TaskDeskError)
async def taskdesk_error_handler(request: Request, exc: TaskDeskError):
    log_fn = logger.error if exc.status_code >= 500 else logger.warning
    log_fn(
        f"{type(exc).__name__}: {exc.message}",
        extra={"data": {"path": request.url.path, "status": exc.status_code}}
    )
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(PyMongoError)
async def storage_error_handler(request: Request, exc: PyMongoError):
    logger.error(f"Storage failure on {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


# REGISTER ROUTERS
app.include_router(auth.router)
app.include_router(users.router)
app.include_router(departments.router)
app.include_router(projects.router)
app.include_router(tasks.router)
app.include_router(project_vendors.router)
app.include_router(notifications.router)

logger.info("All routers registered, TaskDesk API ready")

@app.get("/")
async def root():
    return {"status": "online", "message": "TaskDesk API is running"}

@app.get("/api/health")
async def health():
    """Liveness plus a database round trip; never raises."""
    try:
        user_count = await db.users.count_documents({})
        database = {"connection": "Connected", "userCount": user_count}
        status = "OK"
    except PyMongoError as e:
        logger.error(f"Health check database ping failed: {e}")
        database = {"connection": "Disconnected", "error": str(e)}
        status = "ERROR"
    return {
        "status": status,
        "timestamp": datetime.now().isoformat(),
        "environment": config.ENV,
        "database": database,
    }
