import asyncio
import pytest

import duplex


class Recorder(duplex.Channel):
    """ A channel that goes nowhere: outbound messages are recorded, and
        inbound messages are injected by the test.
    """

    def __init__(self):
        duplex.Channel.__init__(self)
        self.sent = list()
        self.disposed = 0

    def send_message(self, message):
        self.sent.append(list(message))

    def dispose(self):
        self.disposed += 1

    def inject(self, message):
        self._deliver(message, self.send_message)


async def _turns(count):
    for turn in range(count):
        await asyncio.sleep(0)


@pytest.fixture
def turns():
    """ Returns a coroutine function that lets the event loop run a given
        number of times.
    """

    return _turns


@pytest.fixture
def bridge():
    bridge = duplex.Bridge()
    yield bridge
    bridge.dispose()


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
def disposer():
    store = duplex.disposable.DisposableStore()
    yield store
    store.dispose()


@pytest.fixture
def collect_faults():
    """ Returns a function that, called from inside a running test, installs
        an exception handler on the event loop and returns the list the
        handler appends to.
    """

    collected = list()

    def install():
        loop = asyncio.get_running_loop()
        loop.set_exception_handler(lambda loop, context: collected.append(context))
        return collected

    return install


@pytest.fixture
def environment():
    yield
    duplex.config.load()


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
