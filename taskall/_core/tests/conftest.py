# The fixtures and the async-test hook live in taskall/tests/conftest.py
from ...tests.conftest import scheduler, pytest_pyfunc_call  # noqa: F401
