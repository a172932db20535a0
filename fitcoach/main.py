# main.py
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from fitcoach.core.config import LOG_LEVEL
from fitcoach.core.exceptions import DomainError, GenerationError, InputValidationError, PrimaryLiftError
from fitcoach.core.responses import fail
from fitcoach.database import create_tables, database
from fitcoach.routers import (
    blocked,
    chat,
    exercise,
    goal,
    meal,
    meal_log,
    plan,
    program,
    progress,
    tracking,
    user,
    workout,
)

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="FitCoach")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def startup():
    create_tables()
    await database.connect()


@app.on_event("shutdown")
async def shutdown():
    await database.disconnect()


# --- Error envelope ---

@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content=fail(str(exc.errors())))


@app.exception_handler(InputValidationError)
async def input_validation_handler(request: Request, exc: InputValidationError):
    return JSONResponse(status_code=400, content=fail(str(exc)))


@app.exception_handler(GenerationError)
async def generation_error_handler(request: Request, exc: GenerationError):
    logger.error("Generation failed on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=500, content=fail(str(exc)))


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError):
    # rule rejections are a normal outcome, not a transport error
    if isinstance(exc, PrimaryLiftError):
        return JSONResponse(status_code=200, content=fail(str(exc), suggestion=exc.suggestion))
    return JSONResponse(status_code=200, content=fail(str(exc)))


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content=fail(str(exc.detail)), headers=exc.headers)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s", request.url.path)
    return JSONResponse(status_code=500, content=fail("Internal server error"))


app.include_router(user.router)
app.include_router(program.router)
app.include_router(goal.router)
app.include_router(plan.router)
app.include_router(workout.router)
app.include_router(exercise.router)
app.include_router(meal.router)
app.include_router(blocked.router)
app.include_router(meal_log.router)
app.include_router(tracking.router)
app.include_router(progress.router)
app.include_router(chat.router)


@app.get("/")
async def root():
    return {"success": True, "data": {"service": "fitcoach"}}
