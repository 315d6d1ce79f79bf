"""
main.py

Entry point for the Site Schedule API.

    python main.py
    SEED_DEMO_DATA=true uvicorn main:app --reload --port 8000

With SEED_DEMO_DATA=true the demo project id is printed in the startup log;
PUT {"newStartDate": "2025-03-10"} to /api/v1/projects/{id}/start-date to
move its schedule by five working days.
"""

import uvicorn

from api import app  # noqa: F401  (uvicorn target "main:app")
from config import settings


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host="127.0.0.1",
        port=8000,
        reload=True,
        log_level=settings.LOG_LEVEL.lower(),
    )
