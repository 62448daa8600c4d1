"""
Run the sponsor relay: ``python -m aidchain_sdk.relay`` or ``aidchain-relay``.
"""
import argparse
import logging
import os
import sys
from typing import List, Optional

from dotenv import load_dotenv

from ..config import RelaySettings
from ..exceptions import ConfigurationError
from ..version import __version__

logger = logging.getLogger("aidchain_sdk.relay")


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    logging.basicConfig(
        level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    parser = argparse.ArgumentParser(description="AidChain sponsored transaction relay")
    parser.add_argument("--host", default=os.environ.get("HOST", "0.0.0.0"))
    parser.add_argument("--port", type=int, default=None, help="Overrides PORT")
    args = parser.parse_args(argv)

    try:
        settings = RelaySettings.from_env()
    except ConfigurationError as e:
        logger.error(str(e))
        return 1

    logger.info(f"aidchain-sdk {__version__}, API key loaded: {settings.masked_key}")
    port = args.port or settings.port

    from .app import create_app
    app = create_app(settings)
    logger.info(f"Sponsor relay running on port {port}")
    logger.info(f"Health: http://localhost:{port}/health")
    app.run(host=args.host, port=port)
    return 0


if __name__ == "__main__":
    sys.exit(main())
