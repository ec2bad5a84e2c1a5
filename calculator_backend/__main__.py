"""Run the API server: ``python -m calculator_backend``."""

import uvicorn

from calculator_backend.shared.config import load_config


def main() -> None:
    config = load_config()
    uvicorn.run(
        "calculator_backend.api.app:app",
        host=config.server.host,
        port=config.server.port,
        log_level=config.log_level.lower(),
    )


if __name__ == "__main__":
    main()
