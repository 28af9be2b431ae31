"""taskall - wait for a whole list of tasks at once, failing fast
"""

# General layout:
#
# taskall/_core/... is the self-contained core library: tasks, schedulers,
# and the all_of aggregation.
#
# This file pulls together the friendly public API, by re-exporting the
# public bits of the _core API.
#
# Uses `from x import y as y` for compatibility with `pyright --verifytypes`

from ._version import __version__

from ._core import (
    AlreadySettledError as AlreadySettledError,
    WouldBlock as WouldBlock,
    SchedulerClosedError as SchedulerClosedError,
    NoSchedulerError as NoSchedulerError,
    RejectionError as RejectionError,
    Settlement as Settlement,
    Fulfilled as Fulfilled,
    Rejected as Rejected,
    TaskState as TaskState,
    Task as Task,
    Resolver as Resolver,
    open_task as open_task,
    fulfilled as fulfilled,
    rejected as rejected,
    fulfill_after as fulfill_after,
    reject_after as reject_after,
    from_call as from_call,
    current_scheduler as current_scheduler,
    use_scheduler as use_scheduler,
    AsyncioScheduler as AsyncioScheduler,
    Plain as Plain,
    normalize as normalize,
    all_of as all_of,
)

# Submodules imported by default
from . import abc
from . import testing

################################################################

from ._util import publish_names

publish_names(__name__, globals())
publish_names(abc.__name__, abc.__dict__)
publish_names(testing.__name__, testing.__dict__)
del publish_names
