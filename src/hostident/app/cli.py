import os
import logging
from logging.config import dictConfig
import json

import sentry_sdk

from hostident.app.config import Settings


def configure_logging(debug: bool = False):
    logging_config_file = os.getenv("LOGGING_CONFIG_FILE", "")

    if len(logging_config_file) > 0:
        with open(logging_config_file) as fl:
            dictConfig(json.load(fl))
        return

    logging.basicConfig()
    logging.getLogger().setLevel(logging.DEBUG if debug else logging.INFO)


def init_sentry(settings: Settings) -> bool:
    if not settings.sentry_dsn:
        return False
    sentry_sdk.init(dsn=settings.sentry_dsn, send_default_pii=False)
    return True


def invoke():
    from hostident.resolve.__main__ import main

    main()


if __name__ == "__main__":
    invoke()
