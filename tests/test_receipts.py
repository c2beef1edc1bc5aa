""" The lazy delivery receipt protocol, observed from one peer talking to a
    channel that only records what it is given.
"""

import asyncio
import pytest

import duplex


@pytest.mark.asyncio
async def test_fire_and_forget(recorder, turns):

    peer = duplex.connect(recorder)
    invocation = peer.invoke('ping', 'x')

    assert invocation.sent == False
    await turns(1)
    assert recorder.sent == []

    await turns(1)
    assert recorder.sent == [[0, 'ping', 'x']]
    assert invocation.sent == True
    assert invocation.receipt == False
    assert invocation.id == 0
    assert peer.pending == {}


@pytest.mark.asyncio
async def test_synchronous_subscription(recorder, turns):

    peer = duplex.connect(recorder)
    invocation = peer.invoke('ping', 'x')
    future = invocation.subscribe()

    assert invocation.subscribe() is future
    assert invocation.receipt == True

    await turns(2)
    assert recorder.sent == [[1, 'ping', 'x']]
    assert list(peer.pending) == [1]

    recorder.inject([-1, None, 'pong'])
    assert await invocation == 'pong'
    assert peer.pending == {}


@pytest.mark.asyncio
async def test_subscription_in_the_next_turn(recorder, turns):

    peer = duplex.connect(recorder)
    invocation = peer.invoke('ping')

    await turns(1)
    invocation.subscribe()

    await turns(1)
    assert recorder.sent == [[1, 'ping']]


@pytest.mark.asyncio
async def test_ensure_future_subscribes_in_time(recorder, turns):

    peer = duplex.connect(recorder)
    task = asyncio.ensure_future(peer.invoke('ping'))

    await turns(2)
    assert recorder.sent == [[1, 'ping']]

    recorder.inject([-1, None, 'pong'])
    assert await task == 'pong'


@pytest.mark.asyncio
async def test_done_callbacks(recorder, turns):

    peer = duplex.connect(recorder)
    invocation = peer.invoke('ping')

    outcomes = list()
    invocation.add_done_callback(lambda future: outcomes.append(future.result()))

    await turns(2)
    recorder.inject([-1, None, 'pong'])
    await turns(1)

    assert outcomes == ['pong']


@pytest.mark.asyncio
async def test_late_subscription(recorder, turns):

    peer = duplex.connect(recorder)
    invocation = peer.invoke('ping')

    await turns(2)

    with pytest.raises(duplex.ReceiptError):
        await invocation

    with pytest.raises(duplex.ReceiptError):
        invocation.add_done_callback(print)

    with pytest.raises(duplex.ReceiptError, match='delivery receipt'):
        invocation.subscribe()

    assert recorder.sent == [[0, 'ping']]


@pytest.mark.asyncio
async def test_request_ids(recorder, turns):

    peer = duplex.connect(recorder)
    invocations = list()

    for count in range(5):
        invocation = peer.invoke('count', count)
        invocation.subscribe()
        invocations.append(invocation)

    # Unsubscribed invocations do not use up an id.
    peer.invoke('ignored')

    await turns(2)

    ids = [message[0] for message in recorder.sent]
    assert ids == [1, 2, 3, 4, 5, 0]

    later = peer.invoke('count', 5)
    later.subscribe()
    assert later.id == 6

    # Responses are matched by id, not by order of arrival.
    for id in (3, 1, 5, 2, 4):
        recorder.inject([-id, None, id * 10])

    results = [await invocation for invocation in invocations]
    assert results == [10, 20, 30, 40, 50]


@pytest.mark.asyncio
async def test_settle_once(recorder, turns, collect_faults):

    faults = collect_faults()

    peer = duplex.connect(recorder)
    invocation = peer.invoke('ping')
    invocation.subscribe()
    await turns(2)

    recorder.inject([-1, None, 'first'])
    recorder.inject([-1, None, 'second'])

    assert await invocation == 'first'
    assert len(faults) == 1
    assert isinstance(faults[0]['exception'], duplex.ProtocolError)
    assert 'unknown request 1' in str(faults[0]['exception'])


@pytest.mark.asyncio
async def test_pending_operation_settles_once():

    loop = asyncio.get_running_loop()
    operation = duplex.peer.PendingOperation(1, loop.create_future())

    assert operation.settled == False
    operation.resolve('first')
    operation.resolve('second')
    operation.reject(ValueError('third'))

    assert operation.settled == True
    assert operation.future.result() == 'first'


@pytest.mark.asyncio
async def test_error_responses(recorder, turns):

    peer = duplex.connect(recorder)
    invocation = peer.invoke('ping')
    invocation.subscribe()
    await turns(2)

    recorder.inject([-1, {'$': 'Error', 'message': 'boom', 'name': 'ValueError'}, {'$': 'Undefined'}])

    with pytest.raises(duplex.RemoteError, match='boom') as caught:
        await invocation

    assert caught.value.name == 'ValueError'


@pytest.mark.asyncio
async def test_undecodable_responses(recorder, turns):

    peer = duplex.connect(recorder)
    invocation = peer.invoke('ping')
    invocation.subscribe()
    await turns(2)

    recorder.inject([-1, None, {'$': 'Date', 'iso': '2024-01-01'}])

    with pytest.raises(duplex.ProtocolError, match='not registered'):
        await invocation


@pytest.mark.asyncio
async def test_send_failures_reject(turns):

    class Broken(duplex.Channel):

        def send_message(self, message):
            raise duplex.ChannelError('unplugged')

        def dispose(self):
            pass

    peer = duplex.connect(Broken())
    invocation = peer.invoke('ping')
    invocation.subscribe()

    await turns(2)

    with pytest.raises(duplex.ChannelError, match='unplugged'):
        await invocation

    assert peer.pending == {}


@pytest.mark.asyncio
async def test_callable_arguments(recorder, turns):

    peer = duplex.connect(recorder)
    peer.invoke('each', [1, 2], print, 'tail')
    await turns(2)

    assert recorder.sent == [[0, 'each', [1, 2], {'$': 'Function', 'id': 1}, 'tail']]
    assert peer.functions.lookup(1) is print


@pytest.mark.asyncio
async def test_method_names():

    peer = duplex.connect(duplex.Bridge().left)

    with pytest.raises(TypeError):
        peer.invoke(1)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
