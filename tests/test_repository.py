import pytest

from fireworq import config
from fireworq.model import Queue, Routing
from fireworq.queue_factory import UnknownDriverError
from fireworq.repository import (
    InMemoryQueueRepository,
    InMemoryRoutingRepository,
    QueueNotFoundError,
    new_repositories,
)


def _clear(repos):
    for q in repos.queue.find_all():
        repos.queue.delete_by_name(q.name)
    for r in repos.routing.find_all():
        repos.routing.delete_by_job_category(r.job_category)


@pytest.fixture
def repo():
    with config.locally("driver", "in-memory"):
        repos = new_repositories()
    _clear(repos)
    yield repos
    _clear(repos)


def test_invalid_driver():
    with config.locally("driver", "nothing"):
        with pytest.raises(UnknownDriverError, match="Unknown driver: nothing"):
            new_repositories()


def test_unavailable_mysql_driver():
    with config.locally("driver", "mysql"):
        with pytest.raises(UnknownDriverError):
            new_repositories()


def test_queue(repo):
    assert repo.queue.find_all() == []

    repo.queue.add(Queue(name="repo_queue_test_queue_1"))
    repo.queue.add(Queue(name="repo_queue_test_queue_2", max_workers=1000))
    assert len(repo.queue.find_all()) == 2

    q = repo.queue.find_by_name("repo_queue_test_queue_2")
    assert q.name == "repo_queue_test_queue_2"
    assert q.max_workers == 1000

    repo.queue.delete_by_name("repo_queue_test_queue_1")
    with pytest.raises(QueueNotFoundError):
        repo.queue.find_by_name("repo_queue_test_queue_1")

    assert repo.queue.revision() == 0


def test_queue_add_overwrites(repo):
    repo.queue.add(Queue(name="q", polling_interval=100))
    repo.queue.add(Queue(name="q", polling_interval=300))
    assert repo.queue.find_all() == [Queue(name="q", polling_interval=300)]


def test_routing(repo):
    assert repo.routing.find_all() == []

    repo.queue.add(Queue(name="repo_routing_test_queue_1"))
    repo.queue.add(Queue(name="repo_routing_test_queue_2"))

    repo.routing.add("repo_routing_test_A", "repo_routing_test_queue_1")
    repo.routing.add("repo_routing_test_B", "repo_routing_test_queue_1")
    repo.routing.add("repo_routing_test_C", "repo_routing_test_queue_2")

    assert repo.routing.find_all() == [
        Routing(queue_name="repo_routing_test_queue_1", job_category="repo_routing_test_A"),
        Routing(queue_name="repo_routing_test_queue_1", job_category="repo_routing_test_B"),
        Routing(queue_name="repo_routing_test_queue_2", job_category="repo_routing_test_C"),
    ]

    assert repo.routing.find_queue_name_by_job_category("repo_routing_test_A") == "repo_routing_test_queue_1"

    repo.routing.delete_by_job_category("repo_routing_test_B")
    assert repo.routing.find_queue_name_by_job_category("repo_routing_test_B") == ""

    assert repo.routing.reload() is None
    assert repo.routing.revision() == 0


def test_repositories_share_storage(repo):
    repo.queue.add(Queue(name="shared"))
    repo.routing.add("cat", "shared")
    with config.locally("driver", "in-memory"):
        other = new_repositories()
    assert other.queue.find_by_name("shared") == Queue(name="shared")
    assert other.routing.find_queue_name_by_job_category("cat") == "shared"


def test_separate_stores_are_isolated():
    from fireworq.repository import _Store

    a = InMemoryQueueRepository(_Store())
    b = InMemoryQueueRepository(_Store())
    a.add(Queue(name="only_a"))
    assert b.find_all() == []
    r = InMemoryRoutingRepository(_Store())
    r.add("x", "only_a")
    assert r.find_all() == [Routing(queue_name="only_a", job_category="x")]


def test_queue_not_found_error_message():
    err = QueueNotFoundError("foo")
    assert str(err) == "No such queue: foo"
    assert err.queue_name == "foo"