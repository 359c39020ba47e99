# -*- coding: utf-8 -*-

"""Promise implementation: values settled once, and callbacks chained on them.

Example:

    >>> from settle import Promise
    >>> p = Promise.resolve(1).then(lambda v: v + 1)
    >>> p.result(1)
    2
"""

from .__version__ import __version__  # noqa

from . import config, log
from .decorators import wrap_promise
from .deferred import Deferred
from .errors import RejectionError, TimeoutError
from .promise import Promise
from .scheduler import (ManualScheduler, Scheduler, ThreadScheduler,
                        get_scheduler, set_scheduler)

__all__ = ['Deferred', 'ManualScheduler', 'Promise', 'RejectionError',
           'Scheduler', 'ThreadScheduler', 'TimeoutError', 'get_scheduler',
           'init', 'set_scheduler', 'wrap_promise']


def init(config_file_path=None):
    """Load the config file, and apply the log settings it contains.

    Calling this function is optional: without it, default settings are used.

    Args:
        config_file_path (str, optional): path of the config file. By
            default, "settle.ini" in the user config directory.
    """
    config.load(config_file_path)
    log.set_debug_mode(config.get('debug_mode'))
    log.set_logs_level(config.get('log_levels'))
