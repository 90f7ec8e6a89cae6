"""Run the HTTP service: python -m moneybook.api (or the moneybook-api script)."""

import uvicorn

from moneybook.config import get_settings
from moneybook.logs import configure_logging


def main() -> None:
    app_settings = get_settings().app
    configure_logging(app_settings.log_level, json_output=app_settings.log_json)

    uvicorn.run(
        "moneybook.api.app:create_app",
        factory=True,
        host=app_settings.api_host,
        port=app_settings.api_port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
