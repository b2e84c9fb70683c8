"""
ClauseGuard Backend — Server Entry Point
=========================================

What:  Runs the API under uvicorn, bound to BACKEND_HOST / BACKEND_PORT.
Who:   `python -m clauseguard` or the `clauseguard` console script.
"""

import uvicorn

from clauseguard.config import settings


def main() -> None:
    uvicorn.run(
        "clauseguard.main:app",
        host=settings.backend_host,
        port=settings.backend_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
