# Small helpers shared by the public modules and the core

from abc import ABCMeta


def _is_private_module(name):
    parts = name.split(".")
    return parts[0] == "taskall" and any(part.startswith("_") for part in parts)


def publish_names(public_module, namespace):
    """Make the public objects in ``namespace`` claim ``public_module`` as
    their ``__module__``.

    Only objects defined somewhere under a private ``taskall._*`` module are
    touched, along with the methods of any such class. That way reprs, pickles
    and generated docs point at ``taskall.Task`` rather than
    ``taskall._core._task.Task``.

    """
    todo = [obj for name, obj in namespace.items() if not name.startswith("_")]
    visited = set()
    while todo:
        obj = todo.pop()
        # classes can reach themselves through their own __dict__
        if id(obj) in visited:
            continue
        visited.add(id(obj))
        module = getattr(obj, "__module__", None)
        if not isinstance(module, str) or not _is_private_module(module):
            continue
        obj.__module__ = public_module
        if isinstance(obj, type):
            todo.extend(vars(obj).values())


class NoPublicConstructor(ABCMeta):
    """Metaclass for classes that only the library itself may instantiate or
    extend.

    Calling the class raises :exc:`TypeError`; internal code makes instances
    with ``cls._create(...)`` instead. Subclassing raises :exc:`TypeError` as
    well. It derives from :class:`~abc.ABCMeta` so it can sit on classes that
    implement one of our ABCs.

    """

    def __new__(mcls, name, bases, namespace):
        locked = [base.__name__ for base in bases if isinstance(base, mcls)]
        if locked:
            raise TypeError("{} can't be subclassed".format(", ".join(locked)))
        return super().__new__(mcls, name, bases, namespace)

    def __call__(cls, *args, **kwargs):
        raise TypeError(
            "{} has no public constructor; use taskall.open_task() "
            "or one of its helpers".format(cls.__qualname__)
        )

    def _create(cls, *args, **kwargs):
        return super().__call__(*args, **kwargs)
