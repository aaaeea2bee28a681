import logging
from typing import Any, Dict

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .cache.schedule_store import ScheduleStore, get_schedule_store
from .config import get_settings
from .logging_config import configure_logging
from .schedule_routes import router as schedule_router
from .tool_routes import router as tool_router
from .user_routes import debug_router
from .user_routes import router as user_router


configure_logging()
logger = logging.getLogger(__name__)
app = FastAPI(title="Degree Planner Backend", version="0.1.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

settings_snapshot = get_settings()
logger.info("Planner starting with model: %s", settings_snapshot.planner_agent_model)
logger.info("OpenAI API key configured: %s", bool(settings_snapshot.openai_api_key))
logger.info("Saved schedules enabled: %s", bool(settings_snapshot.database_url))

app.include_router(schedule_router)
app.include_router(tool_router)
app.include_router(user_router)
app.include_router(debug_router)


@app.get("/healthz")
def health(store: ScheduleStore = Depends(get_schedule_store)) -> Dict[str, Any]:
    return {"status": "ok", "activeSchedules": store.active_count()}
