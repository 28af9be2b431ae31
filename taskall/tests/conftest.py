import inspect

import pytest

from ..testing import ManualScheduler, asyncio_test


@pytest.fixture
def scheduler():
    return ManualScheduler()


# async def tests run on a fresh asyncio loop, without needing a plugin or a
# decorator on every test.
@pytest.hookimpl(tryfirst=True)
def pytest_pyfunc_call(pyfuncitem):
    if inspect.iscoroutinefunction(pyfuncitem.obj):
        pyfuncitem.obj = asyncio_test(pyfuncitem.obj)
