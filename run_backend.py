#!/usr/bin/env python
"""Script to run the Taskboard API server."""
import os
from pathlib import Path

import uvicorn

from taskboard.config import Settings

# Run from the repo root so relative SQLite paths land next to this script
os.chdir(Path(__file__).resolve().parent)

if __name__ == "__main__":
    settings = Settings.from_env()
    uvicorn.run(
        "taskboard.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=os.getenv("RELOAD", "false").lower() == "true",
    )
