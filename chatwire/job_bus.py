"""Queue of client jobs handled on a worker loop, with a queue of results."""

from __future__ import annotations

import queue
import threading
import time
from dataclasses import dataclass
from enum import Enum, auto
from typing import Callable, Mapping, Optional

from chatwire.logger import get_logger

_POLL_INTERVAL = 0.0001


class JobType(Enum):
    LIST = auto()
    SEARCH = auto()
    ADD = auto()
    REMOVE = auto()
    AVAILABLE = auto()
    SETUSER = auto()
    SETPASS = auto()
    CREATE = auto()
    LOGIN = auto()
    LOGGED = auto()
    GETUSER = auto()
    DISP_CONTACTS = auto()
    CHAT = auto()
    SEND = auto()
    GETID = auto()
    DELIVERED = auto()
    PENDING = auto()
    CONNECT = auto()
    ACCEPT = auto()
    REJECT = auto()
    HANGUP = auto()
    CLEANUP = auto()
    AWAITING = auto()
    VIDEO_STREAM = auto()
    VIDEO_FAILED = auto()
    AUDIO_FAILED = auto()
    PEER_HANGUP = auto()
    DISCARD = auto()
    EXIT = auto()


@dataclass
class Job:
    """A unit of work with its argument and the values a handler fills in."""

    command: JobType
    argument: str = ""
    int_value: int = 0
    bool_value: bool = False
    valid: bool = False


JobHandler = Callable[[Job], None]


class JobBus:
    """Dispatches queued jobs to handlers and collects the handled jobs."""

    def __init__(self, handlers: Optional[Mapping[JobType, JobHandler]] = None) -> None:
        self.handlers: dict[JobType, JobHandler] = dict(handlers or {})
        self.on_job_ready: list[Callable[[], None]] = []
        self._jobs: "queue.Queue[Job]" = queue.Queue()
        self._responses: "queue.Queue[Job]" = queue.Queue()
        self._exit = threading.Event()

    def _emit_ready(self) -> None:
        for listener in list(self.on_job_ready):
            listener()

    def create(self, job: Job) -> None:
        """Queue a job for the worker loop."""
        self._jobs.put(job)

    def create_response(self, job: Job) -> None:
        """Queue a finished job directly and signal that it is ready."""
        self._responses.put(job)
        self._emit_ready()

    def get_response(self) -> Optional[Job]:
        """Return the oldest handled job, or None when there is none."""
        try:
            return self._responses.get_nowait()
        except queue.Empty:
            return None

    def _dispatch(self, job: Job) -> None:
        try:
            handler = self.handlers[job.command]
        except KeyError:
            raise KeyError(f"no handler for job {job.command.name}") from None
        handler(job)

    def handle_one(self) -> bool:
        """Handle one queued job if there is one; True when a job was handled."""
        try:
            job = self._jobs.get_nowait()
        except queue.Empty:
            return False
        self._dispatch(job)
        get_logger().trace("Handling job => %s", job.command.name)
        if job.command is not JobType.DISCARD:
            self._responses.put(job)
            self._emit_ready()
        return True

    def handle(self) -> None:
        """Run the worker loop until ``set_exit``; then run the EXIT handler."""
        last = Job(JobType.EXIT)
        while not self._exit.is_set():
            try:
                job = self._jobs.get_nowait()
            except queue.Empty:
                time.sleep(_POLL_INTERVAL)
                continue
            self._jobs.put_nowait(job) if False else None
            self._dispatch(job)
            get_logger().trace("Handling job => %s", job.command.name)
            if job.command is not JobType.DISCARD:
                self._responses.put(job)
                self._emit_ready()
            last = job
            time.sleep(_POLL_INTERVAL)
        exit_handler = self.handlers.get(JobType.EXIT)
        if exit_handler is not None:
            exit_handler(last)

    def set_exit(self) -> None:
        self._exit.set()

    def repeated_tasks(self) -> None:
        """Queue the periodic refresh jobs: pending chats, then the contact list."""
        self.create(Job(JobType.PENDING))
        self.create(Job(JobType.LIST))