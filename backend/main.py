from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from dotenv import load_dotenv

load_dotenv()
from fastapi.middleware.cors import CORSMiddleware
from database import Base, engine, SessionLocal
from datetime import datetime
from exceptions import (
    ImbalancedEntryError,
    LedgerError,
    MissingExchangeRateError,
    ReferentialError,
    StorageError,
    ValidationError,
)
import os
import auth
import models  # noqa: F401  registers every table on Base.metadata
import routers.tenants as tenants
import routers.currencies as currencies
import routers.exchange_rates as exchange_rates
import routers.accounts as accounts
import routers.categories as categories
import routers.tags as tags
import routers.transactions as transactions
import routers.budgets as budgets
import routers.recurring_transactions as recurring_transactions
import routers.custom_reports as custom_reports
import routers.dashboards as dashboards
import routers.rbac as rbac
from crud import rbac as crud_rbac
import logging
from fastapi.openapi.utils import get_openapi


LOG_DIR = os.getenv("LOG_DIR", "logs")
os.makedirs(LOG_DIR, exist_ok=True) # Create 'logs' directory if it doesn't exist
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Create a unique log file name based on current date/time
current_time_str = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
LOG_FILE = os.path.join(LOG_DIR, f"app_{current_time_str}.log")

# Configure the root logger
logging.basicConfig(
    level=LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    filename=LOG_FILE, # Log to a file
    filemode='a' # Append to the file if it exists
)

# Also output logs to the console
console_handler = logging.StreamHandler()
console_handler.setLevel(LOG_LEVEL)
console_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
logging.getLogger().addHandler(console_handler) # Add to the root logger

logger = logging.getLogger(__name__)
logger.info("Application starting up...")
# --- End Logging Configuration ---


# Create database tables
Base.metadata.create_all(bind=engine)


@asynccontextmanager
async def lifespan(app: FastAPI):
    db = SessionLocal()
    try:
        crud_rbac.seed_defaults(db)
    finally:
        db.close()

    scheduler = None
    if os.getenv("ENABLE_SCHEDULER", "false").lower() == "true":
        from scheduler import scheduler
        scheduler.start()
        logger.info("EOD scheduler started")
    yield
    if scheduler is not None:
        scheduler.shutdown(wait=False)


app = FastAPI(lifespan=lifespan)

allowed_origins_str = os.getenv(
    "CORS_ALLOWED_ORIGINS",
    "http://localhost:5173,http://127.0.0.1:5173"
)

# Split the string into a list, stripping any whitespace
allowed_origins = [origin.strip() for origin in allowed_origins_str.split(',')]

# Enable CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

LEDGER_ERROR_STATUS = {
    ValidationError: 400,
    ReferentialError: 404,
    ImbalancedEntryError: 422,
    MissingExchangeRateError: 422,
    StorageError: 409,
}


@app.exception_handler(LedgerError)
async def ledger_error_handler(request: Request, exc: LedgerError):
    status_code = LEDGER_ERROR_STATUS.get(type(exc), 400)
    logger.warning(f"{request.method} {request.url.path} failed with {exc.kind}: {exc.message}")
    return JSONResponse(status_code=status_code, content={"detail": exc.to_dict()})


def custom_openapi():
    if app.openapi_schema:
        return app.openapi_schema
    openapi_schema = get_openapi(
        title="Forge Ledger API",
        version="1.0.0",
        description="Multi-tenant double-entry accounting ledger",
        routes=app.routes,
    )
    openapi_schema["components"]["securitySchemes"] = {
        "BearerAuth": {
            "type": "http",
            "scheme": "bearer",
            "bearerFormat": "JWT",
        }
    }
    # Apply security globally to all endpoints
    openapi_schema["security"] = [{"BearerAuth": []}]
    app.openapi_schema = openapi_schema
    return app.openapi_schema

app.openapi = custom_openapi


app.include_router(auth.router)
app.include_router(tenants.router)
app.include_router(currencies.router)
app.include_router(exchange_rates.router)
app.include_router(accounts.router)
app.include_router(categories.router)
app.include_router(tags.router)
app.include_router(transactions.router)
app.include_router(budgets.router)
app.include_router(recurring_transactions.router)
app.include_router(custom_reports.router)
app.include_router(dashboards.router)
app.include_router(rbac.router)

@app.get("/")
async def test_route():
    return {"message": "Welcome to the Forge Ledger API!"}
