import logging

import config
from printify import PrintifyAPI
from relay import PrintifyRelay

logger = logging.getLogger(__name__)

if not config.PRINTIFY_API_TOKEN:
    logger.warning("PRINTIFY_API_TOKEN not set. Printify calls will fail.")

# Service singletons
printify = PrintifyAPI()
relay = PrintifyRelay(printify)


def get_relay() -> PrintifyRelay:
    return relay
