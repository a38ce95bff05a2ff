import uvicorn

from kitchenpos.core.config import get_settings


def main():
    settings = get_settings()
    uvicorn.run(
        "kitchenpos.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.is_development and settings.debug,
        log_level="debug" if settings.debug else "info",
    )


if __name__ == "__main__":
    main()
