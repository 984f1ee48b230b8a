'''
The FastAPI application: lifespan, middleware and routers.
'''
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from .database.engine import Database
from .services.change_feed import ChangeFeed
from .services.ledger_snapshot import LedgerSnapshot
from .common.logger import log
from .common.config import settings
from .api import classes, students, payments, expenses, weekly_summary, documents, changes

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Handles application startup and shutdown events.
    Everything a request needs is created here and stored on app.state.
    """
    # --- On App Startup ---
    log.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}...")
    database = Database(settings.database_url, echo=settings.DATABASE_ECHO).connect()
    if settings.TEST_MODE or settings.CREATE_TABLES_ON_STARTUP:
        await database.create_tables()

    change_feed = ChangeFeed()
    app.state.database = database
    app.state.change_feed = change_feed
    app.state.ledger_snapshot = LedgerSnapshot(change_feed)

    yield # --- Application is now running ---

    # --- On App Shutdown ---
    log.info("Application lifespan shutdown...")
    app.state.ledger_snapshot.close()
    await database.dispose()


# ---- CREATING THE APP ----
app = FastAPI(
    title=settings.APP_NAME,
    description=settings.APP_DESCRIPTION,
    version=settings.APP_VERSION,
    lifespan=lifespan
)

# --- Add CORS Middleware ---
origins = [
    # URL of local frontend
    "http://localhost",
    "http://localhost:5173",
    "http://localhost:3000",
]

# Extend with environment-specific origins
origins.extend(settings.BACKEND_CORS_ORIGINS)

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],)
# --- End of CORS Middleware ---

@app.get("/")
async def health_check():
    return {"status": "ok", "message": f"{settings.APP_NAME} is running"}

app.include_router(classes.router)
app.include_router(students.router)
app.include_router(payments.router)
app.include_router(expenses.router)
app.include_router(weekly_summary.router)
app.include_router(documents.router)
app.include_router(changes.router)
