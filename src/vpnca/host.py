import logging
import os

logger = logging.getLogger(__name__)


class PreconditionError(RuntimeError):
    """The host is not fit to run a provisioning session."""


def require_posix_host():
    if os.name != "posix":
        raise PreconditionError(f"Unsupported host: POSIX is required, this is '{os.name}'.")


def require_superuser():
    if os.geteuid() != 0:
        raise PreconditionError("This command needs to be run with superuser privileges.")
    logger.debug("Running as superuser")
