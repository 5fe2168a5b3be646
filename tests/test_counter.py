import random
import threading

from eventcounter.consumer import ConsumerWrapper
from eventcounter.counter import CounterService
from eventcounter.message import EventType


def test_empty_data():
    assert CounterService().get_data() == {}


def test_counts_per_type_and_user():
    svc = CounterService()
    svc.created("user_a")
    svc.created("user_a")
    svc.created("user_b")
    svc.deleted("user_a")
    svc.updated("user_c")
    assert svc.get_data() == {
        "created": {"user_a": 2, "user_b": 1},
        "deleted": {"user_a": 1},
        "updated": {"user_c": 1},
    }


def test_increment_with_enum_and_string_share_key():
    svc = CounterService()
    svc.increment(EventType.UPDATED, "u")
    svc.increment("updated", "u")
    assert svc.get_data() == {"updated": {"u": 2}}


def test_get_data_returns_copy():
    svc = CounterService()
    svc.created("u")
    data = svc.get_data()
    data["created"]["u"] = 100
    data["other"] = {}
    assert svc.get_data() == {"created": {"u": 1}}


def test_works_as_a_wrapped_consumer():
    svc = CounterService()
    wrapper = ConsumerWrapper(svc, sleep=lambda s: None, rng=random.Random(0))
    wrapper.created("u")
    wrapper.updated("u")
    wrapper.deleted("v")
    assert svc.get_data() == {
        "created": {"u": 1},
        "updated": {"u": 1},
        "deleted": {"v": 1},
    }


def test_concurrent_increments():
    svc = CounterService()

    def work():
        for _ in range(1000):
            svc.created("u")

    threads = [threading.Thread(target=work) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert svc.get_data()["created"]["u"] == 8 * 1000