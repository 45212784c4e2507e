"""
Runs the API server.

    python -m paddock --host 0.0.0.0 --port 8000
"""

import argparse

import uvicorn

from paddock.core.config import settings


def main() -> None:
    parser = argparse.ArgumentParser(description="Run the paddock messaging API")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument(
        "--reload", action="store_true", help="Reload on code changes (development)"
    )
    args = parser.parse_args()

    uvicorn.run(
        "paddock.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
