# -*- coding: utf-8 -*-

import functools

from .promise import Promise, _reason_of


def wrap_promise(f=None, scheduler=None):
    """Decorator who makes a function always return a Promise.

    The returned value is passed to `Promise.resolve()`: a Promise is wrapped
    into a new Promise who follows it, any other value gives a fulfilled
    Promise. An exception raised by the function gives a rejected Promise; as
    in the callbacks, raising `RejectionError` rejects with its reason.

    It can be used directly, or with arguments:

        >>> @wrap_promise
        ... def f(): ...
        >>> @wrap_promise(scheduler=ManualScheduler())
        ... def g(): ...

    Args:
        f (callable): function to decorate.
        scheduler (Scheduler, optional): scheduler of the returned Promises.
    """
    if f is None:
        return functools.partial(wrap_promise, scheduler=scheduler)

    @functools.wraps(f)
    def wrapper(*args, **kwargs):
        try:
            value = f(*args, **kwargs)
        except Exception as error:
            return Promise.reject(_reason_of(error), scheduler=scheduler)
        return Promise.resolve(value, scheduler=scheduler)

    return wrapper
