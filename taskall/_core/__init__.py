"""
This namespace represents the core functionality: tasks, the schedulers that
deliver their notifications, and the aggregation built on top of them.
Things in this namespace are publicly available in either taskall or
taskall.testing.
"""

from ._exceptions import (
    AlreadySettledError, WouldBlock, SchedulerClosedError, NoSchedulerError,
    RejectionError
)

from ._settlement import Settlement, Fulfilled, Rejected

# Has to come first to resolve a circular import: _task -> _current ->
# _asyncio -> _task
from ._task import (
    TaskState, Task, Resolver, open_task, fulfilled, rejected, fulfill_after,
    reject_after, from_call
)

from ._current import current_scheduler, use_scheduler

from ._asyncio import AsyncioScheduler

from ._manual import ManualScheduler

from ._normalize import Plain, normalize

from ._aggregate import all_of
