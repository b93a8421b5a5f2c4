import uvicorn

from agent_platform.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "agent_platform.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEV_MODE,
    )


if __name__ == "__main__":
    main()
