"""Logging that renders as GitHub Actions workflow commands."""

import logging
import os


NOTICE = 25


class GHAFilter(logging.Filter):
    """
    Attach a `ghaprefix` attribute for each record's level.

    Inside GitHub Actions the prefix is a workflow command such as
    `::warning::`; elsewhere it is the plain level name.
    """

    # pylint: disable=too-few-public-methods

    prefixes = {
        logging.DEBUG: "::debug::",
        logging.INFO: "",
        NOTICE: "::notice::",
        logging.WARNING: "::warning::",
        logging.ERROR: "::error::",
        logging.CRITICAL: "::error::",
    }

    def __init__(self, workflow_commands: bool = True):
        super().__init__()
        self.workflow_commands = workflow_commands

    def filter(self, record):
        if self.workflow_commands:
            record.ghaprefix = self.prefixes.get(record.levelno, "")
        elif record.levelno == logging.INFO:
            record.ghaprefix = ""
        else:
            record.ghaprefix = f"{record.levelname}: "
        return True


def setup_logging(stream=None):
    """
    Attach a single handler to the package logger, writing to `stream`.

    Workflow commands are only emitted when running under GitHub Actions.
    """
    logging.addLevelName(NOTICE, "NOTICE")

    package_logger = logging.getLogger(__name__.rpartition(".")[0])
    for handler in package_logger.handlers:
        if any(isinstance(item, GHAFilter) for item in handler.filters):
            return

    workflow_commands = os.environ.get("GITHUB_ACTIONS") == "true"

    # The runner hides debug commands unless step debugging is enabled
    handler = logging.StreamHandler(stream)
    handler.setLevel(logging.DEBUG if workflow_commands else logging.INFO)
    handler.setFormatter(logging.Formatter("%(ghaprefix)s%(message)s"))
    handler.addFilter(GHAFilter(workflow_commands))

    package_logger.addHandler(handler)
    package_logger.setLevel(logging.DEBUG)


class LoggingMixin:
    """Give instances a logger named after their class."""

    # pylint: disable=too-few-public-methods

    @property
    def logger(self) -> logging.Logger:
        """Create and return a logger for this instance's class."""
        if not getattr(self, "_logger", None):
            self._logger = logging.getLogger(
                f"{self.__class__.__module__}.{self.__class__.__name__}"
            )
        return self._logger
