"""
Console entry point for `breathe` and `python -m breathe`.

Typer handles usage errors and Ctrl+C on its own, and `breathe run` ends a
session on Ctrl+C with its summary. What reaches this module is an error
raised by the commands themselves.
"""

import logging
import sys

from breathe.cli.app import app, console
from breathe.cli.formatters import format_error_with_suggestions
from breathe.exceptions import BreatheError

log = logging.getLogger("breathe")


def main() -> None:
    try:
        app()
    except BreatheError as e:
        console.print(format_error_with_suggestions(e))
        sys.exit(1)
    except Exception as e:
        log.debug("Full traceback:", exc_info=True)
        console.print(format_error_with_suggestions(e, {"type": "Unexpected"}))
        sys.exit(1)


if __name__ == "__main__":
    main()
