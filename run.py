"""Entry point: start the SyncControlService server."""

import uvicorn


if __name__ == "__main__":
    from syncapi.config import settings

    print("=" * 60)
    print("  SyncControlService")
    print("=" * 60)
    print(f"  Local:      http://localhost:{settings.port}")
    print(f"  Public API: {settings.public_api_host}/v1/sources")
    print(f"  API Docs:   http://localhost:{settings.port}/docs")
    print("=" * 60)

    uvicorn.run(
        "syncapi.main:app",
        host=settings.host,
        port=settings.port,
        reload=False,
        log_level="debug" if settings.debug else "info",
    )
