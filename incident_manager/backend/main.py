"""CLI entrypoint for launching the FastAPI backend."""

from __future__ import annotations

import uvicorn

from incident_manager.config import load_settings


def run() -> None:
    settings = load_settings()
    uvicorn.run(
        "incident_manager.backend.app:app",
        host=settings.backend_host,
        port=settings.backend_port,
        reload=settings.backend_reload,
        factory=False,
        log_level=settings.log_level,
    )


if __name__ == "__main__":
    run()
