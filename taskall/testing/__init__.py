# Uses `from x import y as y` for compatibility with `pyright --verifytypes`

from .._core import ManualScheduler as ManualScheduler

from ._asyncio_test import asyncio_test as asyncio_test

################################################################

from .._util import publish_names

publish_names(__name__, globals())
del publish_names
