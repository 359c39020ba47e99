# -*- coding: utf-8 -*-

from .promise import Promise


class Deferred(object):
    """Producer side of a Promise, settled from outside of an executor.

    Useful when the code who knows the result is not the code creating the
    Promise: a callback-based API, another thread, a message handler, ...

        >>> df = Deferred(name='DOWNLOAD')
        >>> start_download(on_done=df.resolve, on_error=df.reject)
        >>> return df.promise

    Like the executor callbacks, `resolve()` and `reject()` can be called from
    any thread, and only the first call is taken into account.

    Attributes:
        promise (Promise): the Promise settled by this Deferred.
    """

    def __init__(self, scheduler=None, name=None):
        """
        Args:
            scheduler (Scheduler, optional): scheduler of the Promise. Default
                to the scheduler returned by `get_scheduler()`.
            name (str, optional): name of the Promise, displayed by `repr()`.
        """
        self._fulfill = None
        self._reject = None
        self.promise = Promise(self._executor, scheduler=scheduler,
                               _name=name or 'DEFERRED')

    def _executor(self, fulfill, reject):
        self._fulfill = fulfill
        self._reject = reject

    def resolve(self, value):
        """Fulfill the Promise with a value.

        The value is stored as is: if it's a Promise, it's not followed.
        """
        self._fulfill(value)

    def reject(self, reason):
        """Reject the Promise with a reason (usually an Exception)."""
        self._reject(reason)

    def __repr__(self):
        return 'Deferred(%s)' % self.promise._inner_print()
