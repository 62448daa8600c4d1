#!/usr/bin/env python3
"""
Run the sponsor relay in-process.

Equivalent to ``aidchain-relay`` but shows how to embed the Flask app.
Reads ENOKI_PRIVATE_KEY, PORT and CORS_ORIGINS from the environment or a .env file.
"""
import logging
import sys

from dotenv import load_dotenv

from aidchain_sdk import ConfigurationError
from aidchain_sdk.config import RelaySettings
from aidchain_sdk.relay import create_app


def main():
    load_dotenv()
    logging.basicConfig(level=logging.INFO)

    try:
        settings = RelaySettings.from_env()
    except ConfigurationError as e:
        print(f"ERROR: {e}")
        return 1

    app = create_app(settings)
    print(f"Sponsor relay on http://localhost:{settings.port} (key {settings.masked_key})")
    app.run(port=settings.port)
    return 0


if __name__ == "__main__":
    sys.exit(main())
