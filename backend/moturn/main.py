import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from moturn import config
from moturn.db import create_db_and_tables
from moturn.routers import auth_router, categories, items, likes, chats, chat_socket
from moturn.seed import seed_data

logging.basicConfig(level=config.LOG_LEVEL, format='%(asctime)s %(levelname)s %(name)s - %(message)s')
logger = logging.getLogger(__name__)

app = FastAPI(title="Moturn")

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    content = exc.detail if isinstance(exc.detail, dict) else {"message": exc.detail}
    return JSONResponse(status_code=exc.status_code, content=content, headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"message": "Invalid request data", "errors": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"message": "Internal Server Error"})


# Include routers
app.include_router(auth_router.router)
app.include_router(categories.router)
app.include_router(items.router)
app.include_router(likes.router)
app.include_router(chats.router)
app.include_router(chat_socket.router)


if config.is_development():
    @app.post("/api/seed")
    def seed():
        try:
            seed_data()
        except SQLAlchemyError:
            logger.exception("Error seeding data")
            raise HTTPException(status_code=500, detail="Failed to seed data")
        return {"message": "Seed data created successfully"}


@app.on_event("startup")
async def on_startup():
    create_db_and_tables()


@app.get("/")
def root():
    return {"message": "Moturn backend is live"}
