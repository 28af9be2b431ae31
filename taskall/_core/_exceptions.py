class AlreadySettledError(RuntimeError):
    """Raised by :meth:`Resolver.fulfill` and :meth:`Resolver.reject` if the
    task they control has already been fulfilled or rejected.

    A task settles at most once. After that its state is fixed, and trying
    to settle it again is always a bug in the code holding the resolver.

    """


class WouldBlock(Exception):
    """Raised by :meth:`Task.unwrap` if the task is still pending.

    """


class SchedulerClosedError(RuntimeError):
    """Raised by :meth:`~taskall.abc.Scheduler.call_soon` and
    :meth:`~taskall.abc.Scheduler.call_later` if the scheduler has already
    been closed.

    """


class NoSchedulerError(RuntimeError):
    """Raised by :func:`current_scheduler` if there is no scheduler installed
    in the current context and we aren't running inside a supported async
    library either.

    Pass a ``scheduler=`` argument explicitly, or install one with
    :func:`use_scheduler`.

    """


class RejectionError(Exception):
    """Raised by :meth:`Task.unwrap` (and by awaiting a task) when the task
    was rejected with a reason that isn't an exception.

    Rejection reasons can be arbitrary objects, but only exceptions can be
    raised, so the reason gets boxed up here.

    .. attribute:: reason

       The original rejection reason, unchanged.

    """

    def __init__(self, reason):
        super().__init__(reason)
        self.reason = reason
