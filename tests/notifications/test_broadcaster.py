import json
import threading

from src.access_control.notifications.broadcaster import UpdateBroadcaster


def _decode(frame: str) -> dict:
    assert frame.startswith("data: ") and frame.endswith("\n\n")
    return json.loads(frame[len("data: "):].strip())


def test_subscribe_emits_connected_event_first():
    broadcaster = UpdateBroadcaster(keepalive_seconds=0.05)
    stream = broadcaster.subscribe().events()

    assert _decode(next(stream))["type"] == "connected"
    stream.close()


def test_idle_stream_gets_keepalive():
    broadcaster = UpdateBroadcaster(keepalive_seconds=0.01)
    stream = broadcaster.subscribe().events()
    next(stream)

    assert _decode(next(stream))["type"] == "keepalive"
    stream.close()


def test_broadcast_reaches_every_subscriber():
    broadcaster = UpdateBroadcaster()
    subs = [broadcaster.subscribe() for _ in range(3)]

    delivered = broadcaster.broadcast({"type": "attendance_update", "update": {"lagId": "E001"}})

    assert delivered == 3
    for sub in subs:
        sub.next_event(0.1)  # connected
        assert json.loads(sub.next_event(0.1))["update"] == {"lagId": "E001"}


def test_late_subscriber_does_not_see_earlier_events():
    broadcaster = UpdateBroadcaster()
    broadcaster.broadcast({"type": "attendance_update", "update": {"lagId": "E001"}})

    sub = broadcaster.subscribe()

    assert json.loads(sub.next_event(0.1))["type"] == "connected"
    assert sub.next_event(0.05) is None


def test_closing_stream_deregisters_subscriber():
    broadcaster = UpdateBroadcaster()
    stream = broadcaster.subscribe().events()
    next(stream)
    assert broadcaster.subscriber_count == 1

    stream.close()

    assert broadcaster.subscriber_count == 0
    assert broadcaster.broadcast({"type": "attendance_update", "update": {}}) == 0


def test_subscriber_that_stops_reading_is_dropped():
    broadcaster = UpdateBroadcaster(max_pending=2)
    stuck = broadcaster.subscribe()  # connected event fills one slot
    reader = broadcaster.subscribe()

    broadcaster.broadcast({"type": "attendance_update", "update": {"n": 1}})
    reader.next_event(0.1)
    reader.next_event(0.1)
    delivered = broadcaster.broadcast({"type": "attendance_update", "update": {"n": 2}})

    assert delivered == 1
    assert stuck.closed
    assert broadcaster.subscriber_count == 1


def test_concurrent_subscribe_and_broadcast():
    broadcaster = UpdateBroadcaster(max_pending=1000)
    subs = []
    lock = threading.Lock()

    def join():
        sub = broadcaster.subscribe()
        with lock:
            subs.append(sub)

    def publish():
        for i in range(50):
            broadcaster.broadcast({"type": "attendance_update", "update": {"n": i}})

    threads = [threading.Thread(target=join) for _ in range(20)] + [threading.Thread(target=publish)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert broadcaster.subscriber_count == 20
    for sub in subs:
        sub.close()
    assert broadcaster.subscriber_count == 0
