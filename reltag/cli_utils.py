"""
Common CLI utilities and decorators for consistent command behavior.
"""

import sys
import click
from functools import wraps

from .config import configure_logging, load_config, logger
from .exit_codes import (
    INTERRUPTED,
    get_exit_code_for_exception, error_type
)
from .output import emit_error


def standard_command(func):
    """
    Decorator that provides standard CLI behavior:
    - Logging from the config's logging section, DEBUG with --verbose/-v
    - Errors reported on stderr as a single JSON object
    - Exit codes from ``reltag.exit_codes``
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        verbose = kwargs.pop('verbose', False)

        try:
            configure_logging(load_config(), verbose=verbose)
            return func(*args, **kwargs)
        except KeyboardInterrupt:
            emit_error("Interrupted by user", type="interrupted")
            sys.exit(INTERRUPTED)
        except click.ClickException:
            # Click exceptions already have their exit code
            raise
        except Exception as e:
            logger.debug("Command failed", exc_info=True)
            context = {}
            for attr in ('version', 'tag', 'command', 'returncode'):
                if hasattr(e, attr):
                    context[attr] = getattr(e, attr)
            emit_error(str(e), type=error_type(e), context=context or None)
            sys.exit(get_exit_code_for_exception(e))

    return wrapper


# Standard options that many commands share
common_options = {
    'verbose': click.option('-v', '--verbose', is_flag=True,
                            help='Log debug output to stderr'),
    'pretty': click.option('--pretty', is_flag=True,
                           help='Display as a formatted table instead of JSONL'),
}


def add_common_options(*option_names):
    """
    Decorator to add common options to a command.

    Example:
        @add_common_options('verbose', 'pretty')
        def my_command(verbose, pretty):
            ...
    """
    def decorator(func):
        for name in reversed(option_names):
            if name in common_options:
                func = common_options[name](func)
        return func
    return decorator
