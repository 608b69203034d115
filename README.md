# fireworq

A lightweight job queue library. Jobs are pushed into named queues, and
dispatchers pop them and deliver each one as an HTTP `POST` request to the
job's URL, with the job's payload as a JSON body. The worker answers with a
JSON result such as `{"status": "success"}`, `{"status": "failure"}` or
`{"status": "permanent-failure"}`. Failed jobs are retried after their retry
delay until their retry count runs out.

## Installation

```
pip install fireworq
```

To run the test suite as well:

```
pip install "fireworq[test]"
pytest
```

## Configuration

`fireworq.config.get(key)` looks a setting up in three places, in this order,
and remembers the value it finds:

1. Values set with `fireworq.config.set_value(key, value)`.
2. Environment variables named `FIREWORQ_<KEY>`, for example
   `FIREWORQ_DRIVER=in-memory`.
3. Built-in defaults, which `fireworq.config.set_default(key, value)` can
   change; `fireworq.config.get_default(key)` reads them.

```python
from fireworq import config

config.set_value("driver", "in-memory")
print(config.get("queue_default_max_workers"))   # "20"

with config.locally("bind", "0.0.0.0:8080"):
    ...  # the previous value is restored when the block ends
```

`fireworq.config.keys()` lists the known settings.
`fireworq.descriptions.descriptions()` returns each of them as an `Item`,
sorted by name; `Item.argument()` gives the setting as a command line option
(`--queue-log-level`) and `Item.describe(indent, width)` renders it as
wrapped help text with HTML tags and Markdown links stripped.

## Queues and dispatchers

A job handed to `JobQueue.push` is any object with the methods `category()`,
`url()`, `payload()`, `next_delay()` (milliseconds), `timeout()` (seconds),
`retry_delay()` (seconds) and `retry_count()`.

```python
from dataclasses import dataclass

from fireworq import config, dispatcher, queue_factory
from fireworq.model import Queue


@dataclass
class NewJob:
    target: str
    body: str
    retries: int = 3

    def category(self): return "example"
    def url(self): return self.target
    def payload(self): return self.body
    def next_delay(self): return 0
    def timeout(self): return 10
    def retry_delay(self): return 5
    def retry_count(self): return self.retries


config.set_value("driver", "in-memory")
dispatcher.init()

definition = Queue(name="default", polling_interval=200, max_workers=20)
queue = queue_factory.start(definition)
d = dispatcher.start(queue, definition)

job_id = queue.push(NewJob("http://localhost:8000/work", '{"n": 1}'))

print(d.stats())      # DispatcherStats(outstanding_jobs=..., total_workers=20, idle_workers=...)
print(queue.stats())  # totals of pushes, pops, successes, failures, completions
d.stop()
queue.stop()
```

`dispatcher.init()` configures HTTP workers from the `dispatch_keep_alive`,
`dispatch_max_conns_per_host`, `dispatch_idle_conn_timeout` and
`dispatch_user_agent` settings. `dispatcher.Config` lets you choose a minimum
buffer size, a kicker (by default `fireworq.kicker.PollingKicker`, which
kicks every `polling_interval` milliseconds) and a worker (by default
`fireworq.worker.HTTPWorker`).

`JobQueue.complete(job, result)` takes a `fireworq.result.Result`: on success
the job is deleted, on a permanent failure or when no retries remain it is
deleted and counted as permanently failed, and otherwise it is put back to
be tried again after its retry delay.

Queue definitions and routings, which map a job category to a queue name,
come from `fireworq.repository.new_repositories()`.

## Logs

`fireworq.logwriter.open_file(path)` returns a `FileWriter` that appends to
a file, creating its directory if needed, and opens the file by name again
when `reopen()` is called, which suits log rotation. `fireworq.logwriter.Writer`
wraps an existing stream and does nothing on `reopen()`.

Job queue events are written as one JSON object per line through
`fireworq.queuelog`. Until `fireworq.queuelog.init()` is called nothing is
logged; `init()` sets the log up from the `queue_log` (a file; standard output
if empty), `queue_log_tag` and `queue_log_level` settings. Levels are parsed
by `fireworq.loglevel.parse_level`, which accepts `debug`, `info`, `warn`,
`error`, `fatal` or `0` to `4`.

## Commands

```
fireworq-gendoc config
```

prints the Markdown reference of all configuration settings.

```
fireworq-genauthors --format plain
fireworq-genauthors --format markdown
```

builds the list of authors from the `.mailmap` file and `git shortlog -sne`
in the current directory. The Markdown form also looks up GitHub login names
by e-mail address.

## What this package does not do

- The only storage driver is `in-memory`; jobs, queue definitions and
  routings live in the process and are lost when it exits. The `driver`
  setting defaults to `mysql`, for which no driver is included:
  `queue_factory.new_impl` and `repository.new_repositories` raise
  `UnknownDriverError` for it, so set `driver` to `in-memory`.
- Queues have no inspector or failure log, so `JobQueue.inspector()`,
  `JobQueue.failure_log()` and `JobQueue.node()` return `None`.
- There is no daemon, no HTTP API for pushing jobs or managing queues, and no
  command that starts a server; the package is used as a library.