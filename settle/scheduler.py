# -*- coding: utf-8 -*-

"""Task queues used to deliver the Promise reactions.

A Promise never runs a reaction in the same turn as the call who triggers it
(settlement, or `then()` on an already settled Promise). Instead, the call is
handed to a `Scheduler`, who executes it later, in FIFO order.

Two schedulers are available:
- `ThreadScheduler` (the default) runs the tasks in a dedicated worker thread.
- `ManualScheduler` runs the tasks only when asked to, and uses a virtual
  clock for delayed tasks. It's aimed for tests, and for programs having
  their own main loop.

The scheduler used by default is set by the config entry "scheduler", and can
be replaced using `set_scheduler()`.
"""

from collections import deque
from concurrent.futures import ThreadPoolExecutor
import heapq
import itertools
import logging
from threading import Lock, Timer, current_thread

from . import config

_logger = logging.getLogger(__name__)


class Scheduler(object):
    """Base class of the schedulers.

    A scheduler guarantees that a task is executed strictly later than the
    call to `schedule()`, and that tasks scheduled one after another are
    executed in the same order.
    """

    def schedule(self, task):
        """Execute a task later.

        Args:
            task (callable): function called without argument.
        """
        raise NotImplementedError()

    def delay(self, task, delay):
        """Schedule a task after a delay.

        Args:
            task (callable): function called without argument.
            delay (float): time to wait, in seconds, before scheduling the
                task.
        """
        raise NotImplementedError()

    def is_worker_thread(self):
        """Tell if the current thread is the one executing the tasks.

        A task waiting for another task of the same scheduler would wait
        forever. Schedulers without a dedicated thread always return False.
        """
        return False

    @staticmethod
    def _run_task(task):
        try:
            task()
        except Exception:
            _logger.exception('Scheduled task %s has raised an exception!',
                              task)


class ThreadScheduler(Scheduler):
    """Scheduler executing the tasks in a single worker thread.

    The worker is started at the first scheduled task. Delayed tasks are
    handled by `threading.Timer` instances, who push the task in the queue
    once expired.

    The scheduler can be stopped with `shutdown()`; It restarts
    automatically if a new task is scheduled.
    """

    def __init__(self, name='settle'):
        """
        Args:
            name (str): name of the worker thread.
        """
        self._name = name
        self._lock = Lock()
        self._executor = None
        self._timers = set()
        self._worker_thread = None

    def schedule(self, task):
        with self._lock:
            if self._executor is None:
                _logger.debug('Start scheduler "%s"', self._name)
                self._executor = ThreadPoolExecutor(
                    max_workers=1,
                    thread_name_prefix='Worker %s' % self._name)
            self._executor.submit(self._run_in_worker, task)

    def _run_in_worker(self, task):
        self._worker_thread = current_thread()
        self._run_task(task)

    def is_worker_thread(self):
        return current_thread() is self._worker_thread

    def delay(self, task, delay):
        def on_timeout():
            with self._lock:
                self._timers.discard(timer)
            self.schedule(task)

        timer = Timer(delay, on_timeout)
        timer.daemon = True
        with self._lock:
            self._timers.add(timer)
        timer.start()

    def shutdown(self, wait=True):
        """Stop the worker thread and cancel the pending delayed tasks.

        Tasks already in the queue are executed before the worker stops.

        Args:
            wait (boolean): if True, returns only when the worker thread is
                joined.
        """
        with self._lock:
            executor, self._executor = self._executor, None
            timers, self._timers = self._timers, set()

        _logger.debug('Stop scheduler "%s"', self._name)
        for timer in timers:
            timer.cancel()
        if executor:
            executor.shutdown(wait=wait)


class ManualScheduler(Scheduler):
    """Scheduler executing the tasks only on demand.

    Tasks are queued until `run()` is called. Delayed tasks use a virtual
    clock, who moves forward only with `advance()`.

    Attributes:
        time (float): current value of the virtual clock, in seconds.
    """

    def __init__(self):
        self.time = 0
        self._queue = deque()
        self._timers = []
        self._counter = itertools.count()

    def schedule(self, task):
        self._queue.append(task)

    def delay(self, task, delay):
        deadline = self.time + delay
        heapq.heappush(self._timers, (deadline, next(self._counter), task))

    @property
    def pending(self):
        """Number of tasks waiting in the queue (delayed tasks excluded)."""
        return len(self._queue)

    def run(self):
        """Execute all the queued tasks, until the queue is empty.

        Tasks scheduled during the run are executed too.

        Returns:
            int: number of tasks executed.
        """
        nb_tasks = 0
        while self._queue:
            task = self._queue.popleft()
            self._run_task(task)
            nb_tasks += 1
        return nb_tasks

    def advance(self, delay):
        """Move the clock forward and execute the tasks expired meanwhile.

        The delayed tasks are released one by one, in order of deadline, and
        the queue is drained after each one. Thus, effects of a task are
        visible before the next delayed task runs.

        Args:
            delay (float): time, in seconds, to add to the clock.
        Returns:
            int: number of tasks executed.
        """
        target = self.time + delay
        nb_tasks = self.run()
        while self._timers and self._timers[0][0] <= target:
            deadline, _, task = heapq.heappop(self._timers)
            self.time = deadline
            self._queue.append(task)
            nb_tasks += self.run()
        self.time = target
        return nb_tasks


_schedulers = {
    'thread': ThreadScheduler,
    'manual': ManualScheduler
}

_default_scheduler = None
_default_lock = Lock()


def get_scheduler():
    """Returns the scheduler used when none is given to a Promise.

    At first call, the scheduler is created according to the config entry
    "scheduler".
    """
    global _default_scheduler

    with _default_lock:
        if _default_scheduler is None:
            name = config.get('scheduler')
            if name not in _schedulers:
                _logger.warning('Unknown scheduler "%s". The thread '
                                'scheduler will be used instead.', name)
                name = 'thread'
            _default_scheduler = _schedulers[name]()
        return _default_scheduler


def set_scheduler(scheduler):
    """Replace the default scheduler.

    Promises already created keep their own scheduler.

    Args:
        scheduler (Scheduler, optional): new default scheduler. If None, a new
            one will be created from the config at next `get_scheduler()`.
    Returns:
        Scheduler: the previous default scheduler (can be None).
    """
    global _default_scheduler

    with _default_lock:
        previous, _default_scheduler = _default_scheduler, scheduler
    return previous
