"""
Run the tracking service with uvicorn on the configured host and port.

    python main.py            # PORT / MONGODB_URI from the environment or .env
"""

import uvicorn

from config import AppSettings


def main() -> None:
    settings = AppSettings()
    uvicorn.run(
        "asgi:app",
        host=settings.host,
        port=settings.port,
        reload=not settings.is_production,
    )


if __name__ == "__main__":
    main()
