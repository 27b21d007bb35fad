import logging
import os
import sys

# Ensure this directory is in the path for uvicorn and other runners
current_dir = os.path.dirname(os.path.abspath(__file__))
if current_dir not in sys.path:
    sys.path.append(current_dir)

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from database import init_db

from routes.auth_routes import router as auth_router
from routes.habit_routes import router as habit_router
from routes.checkin_routes import router as checkin_router
from routes.sprint_routes import router as sprint_router
from routes.task_routes import router as task_router
from routes.notification_routes import router as notification_router

logger = logging.getLogger(__name__)

init_db()

app = FastAPI(title="Accountability Tracker")

@app.get("/api/v1/health-check")
async def health():
    return {"status": "ok", "message": "Backend is alive!"}

# Configure CORS for the PWA client
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router)
app.include_router(habit_router)
app.include_router(checkin_router)
app.include_router(sprint_router)
app.include_router(task_router)
app.include_router(notification_router)
logger.info("Accountability Tracker routes registered")

@app.get("/")
async def root():
    return {"status": "Accountability Tracker backend is running."}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
