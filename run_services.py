import uvicorn

from shared.core.config import settings

if __name__ == "__main__":
    try:
        uvicorn.run(
            "parking_service.app.main:app",
            host="0.0.0.0",
            port=8002,
            reload=True,
            log_level=settings.LOG_LEVEL.lower(),
        )
    except KeyboardInterrupt:
        print("\nShutting down server...")
