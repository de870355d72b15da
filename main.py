from logging_config import setup_logging

# Initialize logging BEFORE anything else
setup_logging()

from logging_config import get_logger
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError
from middleware.request_lifecycle import RequestLifecycleMiddleware
from routes import push, notifications, settings
from config import config

logger = get_logger("app")

app = FastAPI(title="EquipCPD Push API")

# CORS remains here as it's a global setting; preflight requests are answered here
app.add_middleware(
    CORSMiddleware,
    allow_origins=[config.FRONTEND_URL] if config.ENV == "production" else ["*"],
    allow_credentials=config.ENV == "production",
    allow_methods=["*"],
    allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
)

# Request lifecycle middleware (request ID, context vars, duration logging)
app.add_middleware(RequestLifecycleMiddleware)


@app.exception_handler(PyMongoError)
async def storage_error_handler(request: Request, exc: PyMongoError):
    logger.error(f"Storage error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Storage error"})


# REGISTER ROUTERS
app.include_router(push.router)
app.include_router(notifications.router)
app.include_router(settings.router)

logger.info("All routers registered, EquipCPD Push API ready")

@app.get("/")
async def root():
    return {"status": "online", "message": "EquipCPD Push API is running"}
