"""Core types shared by features and environments: contexts, step levels and test handles."""

from __future__ import annotations

import threading
from enum import IntEnum
from typing import Any, Callable


class Context:
    """An immutable chain of key/value pairs passed between steps."""

    __slots__ = ("_parent", "_key", "_value")

    def __init__(self, parent: Context | None = None, key: Any = None, value: Any = None):
        self._parent = parent
        self._key = key
        self._value = value

    @classmethod
    def background(cls) -> Context:
        """Return an empty root context."""
        return cls()

    def with_value(self, key: Any, value: Any) -> Context:
        """Return a child context in which ``key`` maps to ``value``."""
        if key is None:
            raise ValueError("nil key")
        return Context(self, key, value)

    def value(self, key: Any) -> Any:
        """Return the value bound to ``key`` nearest to this context, or None."""
        node: Context | None = self
        while node is not None:
            if node._parent is not None and node._key == key:
                return node._value
            node = node._parent
        return None

    def __repr__(self) -> str:
        depth = 0
        node = self._parent
        while node is not None:
            depth += 1
            node = node._parent
        return f"Context(depth={depth})"


class Level(IntEnum):
    """The phase a feature step belongs to."""

    SETUP = 0
    ASSESS = 1
    TEARDOWN = 2


class _FailNow(AssertionError):
    """Raised by T.fatal to stop the running test."""


class _SkipNow(Exception):
    """Raised by T.skip to stop the running test."""


class T:
    """A handle for a running test: records messages, failures, skips and subtests."""

    def __init__(self, name: str):
        self.name = name
        self.failed = False
        self.skipped = False
        self.messages: list[str] = []
        self.subtests: list[T] = []
        self._lock = threading.Lock()

    def run(self, name: str, fn: Callable[[T], Any]) -> bool:
        """Run ``fn`` as a subtest named ``name``; return True unless it failed."""
        child = T(f"{self.name}/{name}" if self.name else name)
        with self._lock:
            self.subtests.append(child)
        try:
            fn(child)
        except (_FailNow, _SkipNow):
            pass
        if child.failed:
            self._mark_failed()
        return not child.failed

    def log(self, message: str) -> None:
        """Record a message."""
        with self._lock:
            self.messages.append(str(message))

    def error(self, message: str) -> None:
        """Record a message and mark the test failed; execution continues."""
        self.log(message)
        self._mark_failed()

    def fatal(self, message: str) -> None:
        """Record a message, mark the test failed and stop it."""
        self.error(message)
        raise _FailNow(f"{self.name}: {message}")

    def skip(self, message: str) -> None:
        """Record a message, mark the test skipped and stop it."""
        self.log(message)
        with self._lock:
            self.skipped = True
        raise _SkipNow(message)

    def _mark_failed(self) -> None:
        with self._lock:
            self.failed = True

    def __repr__(self) -> str:
        return f"T(name={self.name!r}, failed={self.failed}, skipped={self.skipped})"