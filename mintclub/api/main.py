"""FastAPI application exposing read-only Mint Club queries."""

import os

import uvicorn
from fastapi import FastAPI

from mintclub import __version__
from mintclub.api.endpoints import router

# Configuration from environment variables with sensible defaults
HOST = os.environ.get("MINTCLUB_HOST", "127.0.0.1")
PORT = int(os.environ.get("MINTCLUB_PORT", "8000"))
DEBUG = os.environ.get("MINTCLUB_DEBUG", "false").lower() in ("true", "1", "yes")

app = FastAPI(
    title="Mint Club client",
    description="Bonding-curve token prices, swap routes and plan previews",
    version=__version__,
)

app.include_router(router)


@app.get("/health")
async def health() -> dict[str, object]:
    """Health check endpoint."""
    return {"status": "ok", "version": __version__}


def run() -> None:
    """Run the API server.

    Configuration via environment variables:
    - MINTCLUB_HOST: Host to bind to (default: 127.0.0.1)
    - MINTCLUB_PORT: Port to bind to (default: 8000)
    - MINTCLUB_DEBUG: Enable debug/reload mode (default: false)
    """
    from mintclub.logging import configure_logging

    configure_logging(verbose=DEBUG)
    uvicorn.run(
        "mintclub.api.main:app",
        host=HOST,
        port=PORT,
        reload=DEBUG,
    )


if __name__ == "__main__":
    run()
