import pytest

from fireworq import jobqueue
from fireworq.inmemory import InMemoryJobQueue
from fireworq.job import Node
from fireworq.jobqueue import InactiveError, JobQueue
from fireworq.model import Queue
from fireworq.result import Result, ResultStatus


class FakeIncoming:
    def __init__(self, url="", *, category="", payload="", next_delay=0, retry_delay=0, retry_count=0):
        self._url = url
        self._category = category
        self._payload = payload
        self._next_delay = next_delay
        self._retry_delay = retry_delay
        self._retry_count = retry_count

    def category(self):
        return self._category

    def url(self):
        return self._url

    def payload(self):
        return self._payload

    def next_delay(self):
        return self._next_delay

    def retry_count(self):
        return self._retry_count

    def retry_delay(self):
        return self._retry_delay

    def timeout(self):
        return 0


class RecordingFailureLog:
    def __init__(self, broken=False):
        self.entries = []
        self.broken = broken

    def add(self, failed, result):
        if self.broken:
            raise RuntimeError("cannot record")
        self.entries.append((failed, result))


class FailureLoggingQueue(InMemoryJobQueue):
    def __init__(self, log):
        super().__init__()
        self._failure_log = log

    def failure_log(self):
        return self._failure_log


class FakeImpl:
    def __init__(self):
        self.started = False
        self.stopped = False

    def start(self):
        self.started = True

    def stop(self):
        self.stopped = True

    def push(self, job):
        raise AssertionError("not used")

    def pop(self, limit):
        raise InactiveError()

    def delete(self, job):
        pass

    def update(self, job, next_info):
        pass

    def is_active(self):
        return False

    def node(self):
        return Node(id="42", host="db.example.com")


def new_queue(name="q"):
    return jobqueue.start(Queue(name=name, max_workers=10), InMemoryJobQueue())


def test_initial_stats_are_zero():
    jq = new_queue()
    stats = jq.stats()
    assert (stats.total_pushes, stats.total_pops, stats.total_completes) == (0, 0, 0)
    assert (stats.total_failures, stats.total_permanent_failures) == (0, 0)
    assert (stats.pushes_per_second, stats.pops_per_second) == (0, 0)


def test_stats_follow_pushes_pops_and_completions():
    jq = new_queue("jobqueue_stats_test_queue")
    jobs = [FakeIncoming(f"job{i}") for i in range(10)]
    for i in (2, 5, 8):
        jobs[i] = FakeIncoming(f"job{i}", next_delay=500000)
    jobs[4] = FakeIncoming("job4", retry_count=4)
    for j in jobs:
        jq.push(j)

    launched = jq.pop(7)
    assert [j.url() for j in launched] == ["job0", "job1", "job3", "job4", "job6", "job7", "job9"]

    stats = jq.stats()
    assert stats.total_pushes == 10
    assert stats.total_pops == 7
    assert (stats.total_completes, stats.total_failures, stats.total_permanent_failures) == (0, 0, 0)

    jq.complete(launched[0], Result(status=ResultStatus.SUCCESS))
    jq.complete(launched[1], Result(status=ResultStatus.PERMANENT_FAILURE))
    jq.complete(launched[2], Result(status=ResultStatus.SUCCESS))
    jq.complete(launched[3], Result(status=ResultStatus.FAILURE))
    jq.complete(launched[4], Result(status=ResultStatus.SUCCESS))
    jq.complete(launched[5], Result(status=ResultStatus.FAILURE))

    stats = jq.stats()
    assert stats.total_pushes == 10
    assert stats.total_pops == 7
    assert stats.total_completes == 5
    assert stats.total_successes == 3
    assert stats.total_failures == 3
    assert stats.total_permanent_failures == 2


def test_push_returns_increasing_ids():
    jq = new_queue()
    first = jq.push(FakeIncoming("a"))
    second = jq.push(FakeIncoming("b"))
    assert second > first
    assert [j.id() for j in jq.pop(10)] == [first, second]


def test_failed_job_with_retries_is_requeued():
    jq = new_queue()
    job_id = jq.push(FakeIncoming("retry", retry_count=2))
    (job,) = jq.pop(1)
    jq.complete(job, Result(status="failure"))

    (again,) = jq.pop(1)
    assert again.id() == job_id
    assert again.retry_count() == 1
    assert again.fail_count() == 1
    assert jq.stats().total_completes == 0


def test_permanent_failure_is_recorded_in_failure_log():
    log = RecordingFailureLog()
    jq = jobqueue.start(Queue(name="q"), FailureLoggingQueue(log))
    jq.push(FakeIncoming("x"))
    (job,) = jq.pop(1)
    result = Result(status="failure", message="boom")
    jq.complete(job, result)

    assert log.entries == [(job, result)]
    assert jq.failure_log() is log
    assert jq.pop(1) == []


def test_broken_failure_log_does_not_break_completion():
    jq = jobqueue.start(Queue(name="q"), FailureLoggingQueue(RecordingFailureLog(broken=True)))
    jq.push(FakeIncoming("x"))
    (job,) = jq.pop(1)
    jq.complete(job, Result(status="permanent-failure"))
    assert jq.stats().total_permanent_failures == 1


def test_optional_features_absent_for_in_memory():
    jq = new_queue()
    assert jq.node() is None
    assert jq.inspector() is None
    assert jq.failure_log() is None
    assert jq.is_active() is True


def test_start_node_and_stop_delegate_to_impl():
    impl = FakeImpl()
    jq = jobqueue.start(Queue(name="remote", max_workers=3), impl)
    assert impl.started
    assert jq.name == "remote"
    assert jq.max_workers == 3
    assert jq.node() == Node(id="42", host="db.example.com")
    assert jq.is_active() is False
    jq.stop()
    assert impl.stopped


def test_pop_propagates_inactive_error():
    jq = JobQueue(Queue(name="q"), FakeImpl())
    with pytest.raises(InactiveError, match="queue is not active"):
        jq.pop(1)
    assert jq.stats().total_pops == 0


def test_connection_closed_error_message():
    assert str(jobqueue.ConnectionClosedError()) == "connection has been closed"