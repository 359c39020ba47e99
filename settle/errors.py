# -*- coding: utf-8 -*-


class RejectionError(Exception):
    """Exception carrying the reason of a rejected Promise.

    Only exceptions can be raised in Python, but a Promise can be rejected
    with any value. Raising a `RejectionError` from an executor or from a
    callback passed to `Promise.then()` rejects the Promise with `reason`
    itself, not with the `RejectionError` instance.

    It's also the exception raised by `Promise.result()` when the rejection
    reason is not an exception.

    Attributes:
        reason: the rejection reason, of any type.
    """

    def __init__(self, reason):
        Exception.__init__(self, reason)
        self.reason = reason


class TimeoutError(Exception):
    """An operation could not be executed within the time allowed."""
    pass
