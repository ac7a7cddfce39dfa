"""
Run the SalesCRM API server.

Usage:
    python -m api
    python -m api --reload  # Development mode
"""

import argparse

import uvicorn

from api.settings import load_settings


def main():
    parser = argparse.ArgumentParser(description="Run SalesCRM API server")
    parser.add_argument("--reload", action="store_true", help="Enable auto-reload")
    parser.add_argument("--host", type=str, default="0.0.0.0", help="Host to bind to")
    parser.add_argument("--port", type=int, help="Port to bind to")
    args = parser.parse_args()

    settings = load_settings()

    uvicorn.run(
        "api.app:app_from_env",
        factory=True,
        host=args.host,
        port=args.port or settings.port,
        reload=args.reload,
        log_config=None,
    )


if __name__ == "__main__":
    main()
