# -*- coding: utf-8 -*-

from functools import partial
import logging
from threading import Condition, Lock

from .errors import RejectionError, TimeoutError
from .scheduler import get_scheduler

_logger = logging.getLogger(__name__)


def _identity(value):
    return value


def _rethrow(reason):
    raise RejectionError(reason)


def _reason_of(error):
    """Convert an exception caught into a rejection reason."""
    if isinstance(error, RejectionError):
        return error.reason
    return error


class Promise(object):
    """It represents an operation expected to be completed in the future.

    A Promise is used for asynchronous computation. It contains a value not yet
    known when the Promise is created. It allows to set callbacks who will be
    called as soon as the result is known. It's a "promise" of a future value.

    A Promise is settled only once: either fulfilled with a value, or
    rejected with a reason. The callbacks are never called synchronously:
    they are always executed later by the scheduler of the Promise, in the
    order they have been added.

    All calls to the methods are thread-safe.
    """

    PENDING = 'pending'
    FULFILLED = 'fulfilled'
    REJECTED = 'rejected'

    def __init__(self, executor, scheduler=None, _name=None, _previous=None):
        """Constructor of the Promise.

        Generate the two callbacks for the executor, then call the `executor`.
        It means the executor will be fully executed before the the constructor
        returns.
        If the executor raises an exception, it's caught and the Promise is
        rejected with this exception (if not settled yet).

        Args:
            executor (callable): Takes 2 callable arguments:
                The first one, `on_fulfilled()` should be called when the
                Promise is fulfilled (ie the tasks is done) and must accept the
                result's value as its only argument.
                The second, `on_rejected()`, should be called when an error
                occurs. It accepts the rejection reason, usually an instance
                of `Exception`.
            scheduler (Scheduler, optional): scheduler executing the
                callbacks. Default to the scheduler returned by
                `get_scheduler()`.
            _name (str): if set, name used when converted to text.
        """

        self._state = self.PENDING
        self._result = None
        self._condition = Condition()
        self._scheduler = scheduler or get_scheduler()
        self._name = _name or getattr(executor, '__name__', '???')
        self._previous = _previous

        # Each element is a pair of callables (on_fulfilled, on_rejected)
        self._reactions = []

        def on_fulfilled(value):
            self._settle(self.FULFILLED, value)

        def on_rejected(reason):
            self._settle(self.REJECTED, reason)

        try:
            executor(on_fulfilled, on_rejected)
        except Exception as error:
            on_rejected(_reason_of(error))

    @property
    def state(self):
        """str: one of PENDING, FULFILLED or REJECTED."""
        with self._condition:
            return self._state

    def _settle(self, state, result):
        with self._condition:
            if self._state != self.PENDING:
                _logger.debug('Try to settle Promise %s already %s. New %s '
                              'result will be ignored: %r',
                              self._name, self._state, state, result)
                return
            self._result = result
            self._state = state

            self._condition.notify_all()

            # Free the references
            reactions, self._reactions = self._reactions, None

            # Enqueued under the lock: a `then()` from another thread can't
            # schedule its callback before the ones already registered.
            if reactions:
                try:
                    self._scheduler.schedule(
                        partial(self._dispatch, state, reactions))
                except Exception:
                    _logger.exception('Unable to schedule the callbacks of '
                                      'Promise %s. They will never be '
                                      'called.', self._name)

    def _dispatch(self, state, reactions):
        for on_fulfilled, on_rejected in reactions:
            if state == self.FULFILLED:
                on_fulfilled()
            else:
                on_rejected()

    def _wait(self, timeout):
        """Block until the promise is settled. Must be called with the lock.

        Raises:
            RuntimeError: if called from the worker thread of the scheduler
                while the promise is pending.
            TimeoutError: if the promise is not settled within the delay.
        """
        if self._state == self.PENDING and \
                self._scheduler.is_worker_thread():
            raise RuntimeError('Promise %s is waited from the scheduler '
                               'thread, who is the only one able to settle '
                               'it.' % self._name)
        self._condition.wait_for(lambda: self._state != self.PENDING,
                                 timeout)
        if self._state == self.PENDING:
            raise TimeoutError()

    def result(self, timeout=None):
        """Wait for the result and returns it as soon as it's available.

        It must not be called from a callback (of `then()`, `catch()` or a
        task of the scheduler) on a pending Promise: the scheduler executes
        them one by one, so the Promise couldn't be settled while waiting.

        Args:
            timeout (float, optional): if set, maximum time to wait the promise
                to be fulfilled. By default, it can wait indefinitely.
        Returns:
            *: value encapsulated, defined by the operation.
        Raises:
            TimeoutError: if the promise is not settled within the delay.
            RuntimeError: if the Promise is pending and the caller is the
                worker thread of its scheduler.
            *: If the promise is rejected, the rejection cause is raised.
                If the cause is not an exception, a `RejectionError` holding
                the reason is raised instead.
        """
        with self._condition:
            self._wait(timeout)

            if self._state == self.REJECTED:
                if isinstance(self._result, BaseException):
                    raise self._result
                raise RejectionError(self._result)
            else:
                return self._result

    def exception(self, timeout=None):
        """Wait for the promise rejection and returns it's error.

        Like `result()`, it must not be called from a callback on a pending
        Promise.

        Args:
            timeout (float, optional): if set, maximum time to wait the promise
                to be rejected. By default, it can wait indefinitely.
        Returns:
            *: the reason of the rejection of the Promise.
            None: if the promise is fulfilled.
        Raises:
            TimeoutError: if the promise is not settled within the delay.
            RuntimeError: if the Promise is pending and the caller is the
                worker thread of its scheduler.
        """

        with self._condition:
            self._wait(timeout)

            if self._state == self.REJECTED:
                return self._result
            else:
                return None

    def then(self, on_fulfilled=None, on_rejected=None):
        """Create a new promise from callbacks called when this one is settled.

        If the promise is fulfilled, the `on_fulfilled` callback will be
        called. Otherwise (the promise has been rejected), the `on_rejected`
        callback is called.
        In any case, the callback will define the state of the returned
        Promise. If the callback raises an exception, the new Promise is
        rejected. The callback can returns:
        - A value: the new promise will be fulfilled with this value.
        - Another Promise: when fulfilled or rejected, will transfer its
            status (state and result/error) to the Promise returned by this
            method.

        If a callback is not defined, the state of the "self" promise is
        transferred to the new promise (the state and the value/error).

        The callback is never called before this method returns, even if the
        promise is already settled.

        Args:
            on_fulfilled (callable, optional):  This callback will receive the
                result of the original promise as argument.
            on_rejected (callable, optional): This callback will receive the
                rejection reason of the original promise as argument.
        Returns:
            Promise<*>: new promise depending of self.
        """
        if not on_rejected:
            name = '%s' % getattr(on_fulfilled, '__name__', '???')
        elif not on_fulfilled:
            name = '<None, %s>' % getattr(on_rejected, '__name__', '???')
        else:
            name = '<%s, %s>' % (getattr(on_fulfilled, '__name__', '???'),
                                 getattr(on_rejected, '__name__', '???'))

        if on_fulfilled is None:
            on_fulfilled = _identity
        if on_rejected is None:
            on_rejected = _rethrow

        def chained_executor(fulfilled, rejected):

            def handle(callback):
                try:
                    value = callback(self._result)
                except Exception as error:
                    return rejected(_reason_of(error))

                if isinstance(value, Promise):
                    value.then(fulfilled, rejected)
                else:
                    fulfilled(value)

            with self._condition:
                if self._state == self.PENDING:
                    self._reactions.append((partial(handle, on_fulfilled),
                                            partial(handle, on_rejected)))
                elif self._state == self.FULFILLED:
                    self._scheduler.schedule(partial(handle, on_fulfilled))
                else:
                    self._scheduler.schedule(partial(handle, on_rejected))

        return Promise(chained_executor, scheduler=self._scheduler,
                       _name=name, _previous=self)

    def catch(self, on_rejected):
        """Create a new promise with a callback called when an error occurs.

        Alias of `self.then(None, on_rejected)`

        Args:
            on_rejected (callable): Takes the rejection reason as argument.
                Will be called if `self` is rejected.
        returns:
            Promise<*>: new Promise chained to `self`. If `self` is fulfilled,
                the promised value will be the same as `self`. Otherwise, the
                value returned by the `on_rejected()` callback.
        """
        return self.then(None, on_rejected)

    def safeguard(self):
        """Catch all errors and log them with the most details possible.

        This method is aimed to protect the program from uncaught rejected
        Promise. If no error handler has been set (via then() or catch()), the
        default behavior is to do nothing, and thus, errors are silently
        ignored.
        Calling `safeguard()` after all chains are set will catch these errors,
        and log them as ERROR with the maximum of details possible.
        """
        def guard(reason):
            if isinstance(reason, BaseException):
                _logger.error('[SAFEGUARD] %s', self, exc_info=(
                    type(reason), reason, reason.__traceback__))
            else:
                _logger.error('[SAFEGUARD] %s rejected with %r', self, reason)

        self.catch(guard)

    def __repr__(self):
        return 'Promise(%s)' % self._inner_print()

    def _inner_print(self):
        with self._condition:
            if self._state == self.REJECTED:
                state = 'R'
            elif self._state == self.FULFILLED:
                state = 'F'
            else:
                state = 'P'

        if self._previous:
            return '%s -> %s %s' % (self._previous._inner_print(), self._name,
                                    state)
        return '%s %s' % (self._name, state)

    @classmethod
    def resolve(cls, value, scheduler=None):
        """Create a promise who resolves the selected value.

        Args:
            value: result of the promise. If it's a promise, the new promise
                will be settled the same way when it is.
            scheduler (Scheduler, optional): scheduler of the new Promise.
        Returns:
            Promise: new Promise, fulfilled with the value passed in
                parameter, or following the promise passed in parameter.
        """
        if isinstance(value, Promise):
            return cls(lambda ok, error: value.then(ok, error),
                       scheduler=scheduler, _name='RESOLVE')
        else:
            return cls(lambda ok, error: ok(value), scheduler=scheduler,
                       _name='RESOLVE')

    @classmethod
    def reject(cls, reason, scheduler=None):
        """Create a Promise rejected for the reason specified.

        Args:
            reason: reason set to the Promise, usually an Exception. It's
                never unwrapped, even if it's a Promise.
            scheduler (Scheduler, optional): scheduler of the new Promise.
        Returns:
            Promise: new Promise already rejected.
        """
        return cls(lambda ok, error: error(reason), scheduler=scheduler,
                   _name='REJECT')

    @classmethod
    def resolve_delay(cls, value, delay, scheduler=None):
        """Create a Promise who resolves the selected value after a delay.

        It's like `Promise.resolve()`, but nothing is done before the end of
        the delay. If `value` is a Promise, the new Promise starts following
        it only when the delay is elapsed.

        Args:
            value: result of the promise, or promise to follow.
            delay (float): delay in seconds, from now.
            scheduler (Scheduler, optional): scheduler of the new Promise,
                also used to wait the delay.
        Returns:
            Promise: new Promise, pending during at least `delay` seconds.
        """
        scheduler = scheduler or get_scheduler()

        def executor(fulfill, reject):
            def on_timeout():
                if isinstance(value, Promise):
                    value.then(fulfill, reject)
                else:
                    fulfill(value)

            scheduler.delay(on_timeout, delay)

        return cls(executor, scheduler=scheduler, _name='RESOLVE_DELAY')

    @classmethod
    def reject_delay(cls, reason, delay, scheduler=None):
        """Create a Promise rejected for the reason specified after a delay.

        Args:
            reason: reason set to the Promise. It's never unwrapped.
            delay (float): delay in seconds, from now.
            scheduler (Scheduler, optional): scheduler of the new Promise,
                also used to wait the delay.
        Returns:
            Promise: new Promise, rejected in `delay` seconds.
        """
        scheduler = scheduler or get_scheduler()

        def executor(fulfill, reject):
            scheduler.delay(partial(reject, reason), delay)

        return cls(executor, scheduler=scheduler, _name='REJECT_DELAY')

    @classmethod
    def all(cls, values, scheduler=None):
        """Create a Promise who wait a list of promises to be all fulfilled.

        The resulting Promise resolve when all of the promises in the list are
        resolved, and returns a list of all the resulting values, keeping the
        order of the promise list.
        If a promise is rejected, then the resulting promise is rejected with
        the same reason, and all results from other promises are ignored.

        Args:
            values (list): promises, or plain values considered as already
                fulfilled promises.
            scheduler (Scheduler, optional): scheduler of the new Promise.
        Returns:
            Promise<list>: resulting promise, fulfilled when all promises
                are fulfilled, or rejected when one of the promises has been
                rejected.
        """
        scheduler = scheduler or get_scheduler()
        promises = [cls.resolve(value, scheduler=scheduler)
                    for value in values]

        if not promises:
            return cls.resolve([], scheduler=scheduler)

        lock = Lock()
        remaining_tasks = len(promises)
        results = [None] * len(promises)

        def executor(resolve, reject):
            def resolve_one_promise(index, value):
                nonlocal remaining_tasks

                with lock:
                    results[index] = value
                    remaining_tasks -= 1
                    is_done = remaining_tasks == 0
                if is_done:
                    resolve(list(results))

            for index, p in enumerate(promises):
                p.then(partial(resolve_one_promise, index), reject)

        return cls(executor, scheduler=scheduler, _name='ALL')

    @classmethod
    def race(cls, values, scheduler=None):
        """Resolve or reject with the fastest Promise.

        Returns a new Promise, settled as soon as the first of the promises is
        settled. Result value or rejection reason of the finished promise are
        transmitted.
        All other Promise result's will be ignored.

        Args:
            values (list): promises, or plain values considered as already
                fulfilled promises.
            scheduler (Scheduler, optional): scheduler of the new Promise.
        Returns:
            Promise: a promise
        Raises:
            ValueError: If the promise list is empty.
        """
        scheduler = scheduler or get_scheduler()
        promises = [cls.resolve(value, scheduler=scheduler)
                    for value in values]

        if not promises:
            raise ValueError('Empty promise list in Promise.race()')

        def executor(resolve, reject):
            for p in promises:
                p.then(resolve, reject)

        return cls(executor, scheduler=scheduler, _name='RACE')
