import logging
import os

log = logging.getLogger("metacomp")
logging.basicConfig(format="[metacomp] %(levelname)s: %(message)s")

#: Values accepted by the METACOMP_LOG environment variable.
LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def log_level(environ=os.environ) -> int:
    """
    Logging level selected by the DEBUG and METACOMP_LOG environment
    variables. Logging is silent unless one of them is set.
    """
    if environ.get("DEBUG", "").lower() == "true":
        return logging.DEBUG
    return LEVELS.get(environ.get("METACOMP_LOG", "").lower(), logging.CRITICAL)


log.setLevel(log_level())
