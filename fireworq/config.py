"""Process-wide configuration values with environment and default fallbacks."""

from __future__ import annotations

import os
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator

ENV_PREFIX = "FIREWORQ_"


@dataclass
class _ConfigItem:
    category: str = ""
    label: str = ""
    default_value: str = ""
    description: str = ""


_LOG_LEVEL_DESCRIPTION = """The level is either a name or a numeric value.  The following table describes the meaning of the value.

|Value|Name   |
|-----|-------|
|`0`    |`debug`  |
|`1`    |`info`   |
|`2`    |`warn`   |
|`3`    |`error`  |
|`4`    |`fatal`  |
"""

_DSN_FORM = (
    "<code><var>user</var>:<var>password</var>@tcp(<var>mysql_host</var>:"
    "<var>mysql_port</var>)/<var>database</var>?<var>options</var></code>"
)

_defaults: dict[str, _ConfigItem] = {
    "bind": _ConfigItem(
        category="manual",
        default_value="127.0.0.1:8080",
        label="<address>:<port>",
        description="""
Specifies the address and the port number of a daemon in a form <code><var>address</var>:<var>port</var></code>.
""",
    ),
    "pid": _ConfigItem(
        category="common",
        default_value="",
        label="<file>",
        description="""
Specifies a file where PID is written to.
""",
    ),
    "access_log": _ConfigItem(
        category="common",
        default_value="",
        label="<file>",
        description="""
Specifies a file where API access log is written to.  It defaults to standard output.

Each line in the file is a JSON string corresponds to a single log item.
""",
    ),
    "access_log_tag": _ConfigItem(
        category="common",
        default_value="fireworq.access",
        label="<tag>",
        description="""
Specifies the value of `tag` field in a access log item.
""",
    ),
    "error_log": _ConfigItem(
        category="common",
        default_value="",
        label="<file>",
        description="""
Specifies a file where error logs are written to.  It defaults to standard error output.

If this value is specified, each line in the file is a JSON string corresponds to a single log item.  Otherwise, each line of the output is a prettified log item.
""",
    ),
    "error_log_level": _ConfigItem(
        category="common",
        default_value="",
        label="<level>",
        description="\nSpecifies a log level of the access log.  "
        + _LOG_LEVEL_DESCRIPTION
        + """
If none of these values is specified, the level is determined by `DEBUG` environment variable.  If `DEBUG` has a non-empty value, then the level is `debug`.  Otherwise, the level is `info`.
""",
    ),
    "shutdown_timeout": _ConfigItem(
        category="manual",
        default_value="30",
        label="<seconds>",
        description="""
Specifies a timeout, in seconds, which the daemon waits on [gracefully shutting down or restarting][section-graceful-restart].
""",
    ),
    "keep_alive": _ConfigItem(
        category="common",
        default_value="false",
        label="true|false",
        description="""
Specifies whether connections should be reused.
""",
    ),
    "config_refresh_interval": _ConfigItem(
        category="manual",
        default_value="1000",
        label="<milliseconds>",
        description="""
Specifies an interval, in milliseconds, at which a Fireworq daemon checks if configurations (such as queue definitions or routings) are changed by other daemons.
""",
    ),
    "driver": _ConfigItem(
        category="manual",
        default_value="mysql",
        label="<driver>",
        description="""
Specifies a driver for job queues and repositories.  The available values are `mysql` and `in-memory`.

Note that `in-memory` driver is not for production use.  It is intended to be used for just playing with Fireworq without a storage middleware or to show the upper bound of performance in a benchmark.
""",
    ),
    "mysql_dsn": _ConfigItem(
        category="manual",
        default_value="tcp(localhost:3306)/fireworq",
        label="<DSN>",
        description="\nSpecifies a data source name for the job queue and the repository database in a form "
        + _DSN_FORM
        + ".  This is in effect only when [the driver](#env-driver) is `mysql` and is mandatory for that case.\n",
    ),
    "repository_mysql_dsn": _ConfigItem(
        category="manual",
        default_value="",
        label="<DSN>",
        description="\nSpecifies a data source name for the repository database in a form "
        + _DSN_FORM
        + ".  This is in effect only when the [driver](#env-driver) is `mysql` and overrides "
        "[the default DSN](#env-mysql-dsn).  This should be used when you want to specify a DSN "
        "differs from [the queue DSN](#env-queue-mysql-dsn).\n",
    ),
    "queue_default": _ConfigItem(
        category="common",
        default_value="",
        label="<name>",
        description="""
Specifies the name of a default queue.  A job whose `category` is not defined via the [routing API][api-put-routing] will be delivered to this queue.  If no default queue name is specified, pushing a job with an unknown category will fail for a [manual setup][section-manual-setup].  A docker-composed instance uses `default` as a default value.

If you already have a queue with the specified name in the job queue database, that one is used.  Or otherwise a new queue is created automatically.
""",
    ),
    "queue_default_polling_interval": _ConfigItem(
        category="common",
        default_value="200",
        label="<milliseconds>",
        description="""
Specifies the default interval, in milliseconds, at which Fireworq checks the arrival of new jobs, used when `polling_interval` in the [queue API][api-put-queue] is omitted.
""",
    ),
    "queue_default_max_workers": _ConfigItem(
        category="common",
        default_value="20",
        label="<number>",
        description="""
Specifies the default maximum number of jobs that are processed simultaneously in a queue, used when `max_workers` in the [queue API][api-put-queue] is omitted.
""",
    ),
    "queue_log": _ConfigItem(
        category="common",
        default_value="",
        label="<file>",
        description="""
Specifies a file where the job queue logs are written to.  It defaults to standard output. No other logs than the job queue logs are written to this file.

Each line in the file is a JSON string corresponds to a single log item.
""",
    ),
    "queue_log_tag": _ConfigItem(
        category="common",
        default_value="fireworq.queue",
        label="<tag>",
        description="""
Specifies the value of `tag` field in a job queue log item JSON.
""",
    ),
    "queue_log_level": _ConfigItem(
        category="common",
        default_value="",
        label="<level>",
        description="\nSpecifies a log level of the job queue logs.  "
        + _LOG_LEVEL_DESCRIPTION
        + """
If none of these values is specified, the level is determined by `DEBUG` environment variable.  If `DEBUG` has a non-empty value, then the level is `debug`.  Otherwise, the level is `info`.
""",
    ),
    "queue_mysql_dsn": _ConfigItem(
        category="manual",
        default_value="",
        label="<DSN>",
        description="\nSpecifies a data source name for the job queue database in a form "
        + _DSN_FORM
        + ".  This is in effect only when the [driver](#env-driver) is `mysql` and overrides "
        "[the default DSN](#env-mysql-dsn).  This should be used when you want to specify a DSN "
        "differs from [the repository DSN](#env-repository-mysql-dsn).\n",
    ),
    "dispatch_user_agent": _ConfigItem(
        category="common",
        default_value="",
        label="<agent>",
        description="""
Specifies the value of `User-Agent` header field used for an HTTP request to a worker.  The default value is <code>Fireworq/<var>version</var></code>.
""",
    ),
    "dispatch_keep_alive": _ConfigItem(
        category="common",
        label="true|false",
        description="""
Specifies whether a connection to a worker should be reused.  This overrides [the default keep-alive setting](#env-keep-alive).
""",
    ),
    "dispatch_max_conns_per_host": _ConfigItem(
        category="common",
        default_value="10",
        label="<number>",
        description="""
Specifies maximum idle connections to keep per-host. This value works only when [connections of the dispatcher are reused](#env-dispatch-keep-alive).
""",
    ),
    "dispatch_idle_conn_timeout": _ConfigItem(
        category="common",
        default_value="0",
        label="<seconds>",
        description="""
Specifies the maximum amount of time of an idle (keep-alive) connection will remain idle before closing itself. If zero, an idle connections will not be closed. 
""",
    ),
}

_values: dict[str, str] = {}
_lock = threading.Lock()


def get(key: str) -> str:
    """Return the current value of ``key``.

    Falls back to the ``FIREWORQ_<KEY>`` environment variable, then to the
    default value.  The resolved value is remembered for later calls.
    """
    with _lock:
        if key in _values:
            return _values[key]
    value = os.environ.get(ENV_PREFIX + key.upper(), "")
    if value == "":
        value = get_default(key)
    with _lock:
        _values[key] = value
    return value


def get_default(key: str) -> str:
    """Return the default value of ``key``, or an empty string."""
    with _lock:
        item = _defaults.get(key)
        return item.default_value if item is not None else ""


def set_value(key: str, value: str) -> None:
    """Set the current value of ``key``."""
    with _lock:
        _values[key] = value


def set_default(key: str, value: str) -> None:
    """Set the default value of ``key``, registering the key if it is new."""
    with _lock:
        item = _defaults.get(key)
        if item is not None:
            item.default_value = value
        else:
            _defaults[key] = _ConfigItem(default_value=value)


@contextmanager
def locally(key: str, value: str) -> Iterator[None]:
    """Override ``key`` with ``value`` inside a ``with`` block.

    Not thread safe; intended for tests.
    """
    original = get(key)
    set_value(key, value)
    try:
        yield
    finally:
        set_value(key, original)


def keys() -> list[str]:
    """Return the known configuration keys."""
    with _lock:
        return list(_defaults)


def _snapshot() -> dict[str, _ConfigItem]:
    """Return a copy of the registered default items."""
    with _lock:
        return {
            name: _ConfigItem(
                category=item.category,
                label=item.label,
                default_value=item.default_value,
                description=item.description,
            )
            for name, item in _defaults.items()
        }