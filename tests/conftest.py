import pytest

from rewatch.config import config
from rewatch.scheduler import scheduler, set_scheduler


@pytest.fixture(autouse=True)
def _fresh_scheduler():
    """Every test starts with an empty queue, no deferral hook and default config."""
    scheduler.clear()
    set_scheduler(None)
    config.reset()
    yield
    scheduler.clear()
    set_scheduler(None)
    config.reset()


@pytest.fixture
def warnings():
    """Collect diagnostics sent through rewatch.errors.warn."""
    messages = []
    config.warn_handler = lambda message, owner: messages.append(message)
    return messages


@pytest.fixture
def errors():
    """Collect (error, owner, info) triples reaching the global error handler."""
    reported = []
    config.error_handler = lambda err, owner, info: reported.append((err, owner, info))
    return reported
