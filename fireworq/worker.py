"""Workers that handle dispatched jobs, and the HTTP worker."""

from __future__ import annotations

import dataclasses
import json
import logging
import re
import threading
from dataclasses import dataclass
from typing import Any, Callable, Protocol, TypeVar, Union

import requests
from requests.adapters import HTTPAdapter

from fireworq import config
from fireworq.job import Job
from fireworq.result import Result, ResultStatus

_log = logging.getLogger(__name__)

T = TypeVar("T")
AnyLogger = Union[logging.Logger, logging.LoggerAdapter]


class Worker(Protocol):
    """Handles a dispatched job."""

    def work(self, job: Job) -> Result: ...


class WorkerConfig(Protocol):
    """Builds workers."""

    def new_worker(self) -> Worker: ...


@dataclass(frozen=True)
class TransportSettings:
    """Connection settings shared by all HTTP workers."""

    keep_alive: bool = True
    max_conns_per_host: int = 2
    idle_conn_timeout: float = 90.0
    user_agent: str = ""


def _new_session(settings: TransportSettings) -> requests.Session:
    session = requests.Session()
    adapter = HTTPAdapter(pool_maxsize=max(1, settings.max_conns_per_host))
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    return session


class _Transport:
    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.settings = TransportSettings()
        self.session = _new_session(self.settings)


_transport = _Transport()

_BOOLS = {
    "1": True, "t": True, "T": True, "TRUE": True, "true": True, "True": True,
    "0": False, "f": False, "F": False, "FALSE": False, "false": False, "False": False,
}
_INTEGER = re.compile(r"[+-]?[0-9]+")


def _parse_bool(value: str) -> bool:
    try:
        return _BOOLS[value]
    except KeyError:
        raise ValueError(f"invalid boolean: {value!r}") from None


def _parse_int32(value: str) -> int:
    if not _INTEGER.fullmatch(value):
        raise ValueError(f"invalid integer: {value!r}")
    number = int(value)
    if not -(2**31) <= number < 2**31:
        raise ValueError(f"integer out of range: {value!r}")
    return number


def _setting(key: str, parse: Callable[[str], T], fallback: T) -> T:
    try:
        return parse(config.get(key))
    except ValueError:
        try:
            return parse(config.get_default(key))
        except ValueError:
            return fallback


def http_init() -> None:
    """Configure HTTP workers from the ``dispatch_*`` settings."""
    settings = TransportSettings(
        keep_alive=_setting("dispatch_keep_alive", _parse_bool, False),
        max_conns_per_host=_setting("dispatch_max_conns_per_host", _parse_int32, 0),
        idle_conn_timeout=float(_setting("dispatch_idle_conn_timeout", _parse_int32, 0)),
        user_agent=config.get("dispatch_user_agent"),
    )
    session = _new_session(settings)
    with _transport.lock:
        _transport.settings = settings
        _transport.session = session


def transport_settings() -> TransportSettings:
    """Return the current HTTP worker settings."""
    with _transport.lock:
        return _transport.settings


def _parse_result(body: bytes) -> Result:
    data = json.loads(body)
    if data is None:
        return Result()
    if not isinstance(data, dict):
        raise ValueError(f"cannot unmarshal {type(data).__name__} into a result")
    fields = {str(k).lower(): v for k, v in data.items()}

    status = fields.get("status")
    message = fields.get("message")
    code = fields.get("code")
    if status is not None and not isinstance(status, str):
        raise ValueError("status must be a string")
    if message is not None and not isinstance(message, str):
        raise ValueError("message must be a string")
    if code is not None and (isinstance(code, bool) or not isinstance(code, int)):
        raise ValueError("code must be an integer")
    return Result(status=status or "", code=code or 0, message=message or "")


@dataclass
class HTTPWorker:
    """Handles a job by POSTing its payload to the job's URL."""

    user_agent: str = ""
    logger: AnyLogger | None = None

    def new_worker(self) -> HTTPWorker:
        """Return a copy with missing settings filled in from the defaults."""
        return dataclasses.replace(
            self,
            user_agent=self.user_agent or transport_settings().user_agent,
            logger=self.logger if self.logger is not None else _log,
        )

    def work(self, job: Job) -> Result:
        """POST the job's payload and interpret the JSON response as a result."""
        with _transport.lock:
            settings = _transport.settings
            session = _transport.session
        logger: Any = self.logger if self.logger is not None else _log

        headers = {
            "Content-Type": "application/json",
            "User-Agent": self.user_agent or settings.user_agent,
        }
        if not settings.keep_alive:
            headers["Connection"] = "close"
        payload = job.payload()
        data = payload.encode("utf-8") if isinstance(payload, str) else payload

        try:
            prepared = requests.Request("POST", job.url(), data=data, headers=headers).prepare()
        except (requests.RequestException, ValueError) as exc:
            return Result(
                status=ResultStatus.INTERNAL_FAILURE,
                message=f"Cannot create http request: {exc}",
            )

        timeout = job.timeout() or None
        error: Exception | None = None
        response: requests.Response | None = None
        try:
            response = session.send(prepared, timeout=timeout, stream=True)
        except (requests.RequestException, OSError, ValueError) as exc:
            error = exc

        logger.debug(
            "Dispatched via HTTP (action=dispatch worker=HTTPWorker url=%s payload=%s)",
            job.url(),
            payload,
        )

        if response is None:
            return Result(status=ResultStatus.INTERNAL_FAILURE, message=f"Request failed: {error}")

        with response:
            try:
                body = response.content
            except (requests.RequestException, OSError) as exc:
                return Result(
                    status=ResultStatus.FAILURE,
                    code=response.status_code,
                    message=f"Cannot read body: {exc}",
                )

        text = body.decode("utf-8", errors="replace")
        try:
            result = _parse_result(body)
        except ValueError as exc:
            return Result(
                status=ResultStatus.FAILURE,
                code=response.status_code,
                message=f"Cannot parse body as JSON: {exc}\nOriginal response body:\n{text}",
            )

        if not result.is_valid():
            return Result(
                status=ResultStatus.FAILURE,
                code=response.status_code,
                message=f"Invalid result status: {result.status}\nOriginal response body:\n{text}",
            )

        result.code = response.status_code
        return result