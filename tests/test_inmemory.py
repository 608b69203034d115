import time

import pytest

from fireworq.inmemory import InMemoryJobQueue
from fireworq.job import NextJob


class FakeIncoming:
    def __init__(self, url="", *, next_delay=0, retry_delay=0, retry_count=0):
        self._url = url
        self._next_delay = next_delay
        self._retry_delay = retry_delay
        self._retry_count = retry_count

    def category(self):
        return "cat"

    def url(self):
        return self._url

    def payload(self):
        return "{}"

    def next_delay(self):
        return self._next_delay

    def retry_count(self):
        return self._retry_count

    def retry_delay(self):
        return self._retry_delay

    def timeout(self):
        return 5


def test_new_queue_is_active_and_empty():
    q = InMemoryJobQueue()
    q.start()
    assert q.is_active() is True
    assert q.pop(10) == []
    q.stop()


def test_pushed_job_carries_incoming_fields():
    q = InMemoryJobQueue()
    job = q.push(FakeIncoming("http://worker.example.com/", retry_count=3, retry_delay=7))
    assert job.url() == "http://worker.example.com/"
    assert job.category() == "cat"
    assert job.payload() == "{}"
    assert job.timeout() == 5
    assert job.retry_count() == 3
    assert job.retry_delay() == 7
    assert job.fail_count() == 0
    assert job.status() == "claimed"
    assert job.next_try() == job.created_at()
    assert job.to_loggable() is job


def test_ids_are_unique_across_queues():
    a = InMemoryJobQueue().push(FakeIncoming())
    b = InMemoryJobQueue().push(FakeIncoming())
    assert b.id() > a.id()


def test_pop_respects_limit_and_fifo():
    q = InMemoryJobQueue()
    for i in range(5):
        q.push(FakeIncoming(f"job{i}"))
    assert [j.url() for j in q.pop(3)] == ["job0", "job1", "job2"]
    assert [j.url() for j in q.pop(3)] == ["job3", "job4"]


def test_deferred_job_is_not_popped():
    q = InMemoryJobQueue()
    q.push(FakeIncoming("later", next_delay=500000))
    q.push(FakeIncoming("now"))
    assert [j.url() for j in q.pop(10)] == ["now"]


def test_pop_orders_by_next_try():
    q = InMemoryJobQueue()
    q.push(FakeIncoming("second", next_delay=50))
    q.push(FakeIncoming("first"))
    time.sleep(0.1)
    assert [j.url() for j in q.pop(10)] == ["first", "second"]


def test_update_requeues_with_new_schedule():
    q = InMemoryJobQueue()
    job = q.push(FakeIncoming("retry", retry_count=2, retry_delay=0))
    (popped,) = q.pop(1)
    q.update(popped, NextJob(popped))
    (again,) = q.pop(1)
    assert again is job
    assert again.retry_count() == 1


def test_update_with_deferred_retry_delay():
    q = InMemoryJobQueue()
    q.push(FakeIncoming("retry", retry_count=2, retry_delay=100))
    (popped,) = q.pop(1)
    q.update(popped, NextJob(popped))
    assert q.pop(1) == []


def test_update_rejects_foreign_job():
    q = InMemoryJobQueue()
    with pytest.raises(TypeError, match="Invalid job structure"):
        q.update(object(), None)