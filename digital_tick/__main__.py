"""Run the API with uvicorn: `python -m digital_tick`."""

import uvicorn

from digital_tick.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run("digital_tick.main:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
