"""
_trace.py
=========
Injectable diagnostic sink for the pipeline.

Stages that have something worth inspecting (the laminarity marker matrix,
the first conflicting column, each evaluated completion) describe it as a
:class:`TraceEvent` and hand it to an optional *trace* callable supplied by
the caller.  Nothing is printed: when no sink is supplied the event is
only logged at DEBUG level.

Any callable taking one ``TraceEvent`` works as a sink.  :class:`TraceRecorder`
is a ready-made sink that keeps events in memory.

Examples
--------
>>> from perfphylo import perfect_phylogeny, TraceRecorder
>>> recorder = TraceRecorder()
>>> result = perfect_phylogeny([[1, 0], [0, 1], [1, 1]], trace=recorder)
>>> [e.name for e in recorder]
['laminarity.markers', 'laminarity.conflict']
>>> recorder.last('laminarity.conflict').data['column']
1
"""

import logging
from typing import Any, Callable, Dict, Iterator, List, NamedTuple, Optional


logger = logging.getLogger(__name__)


class TraceEvent(NamedTuple):
    """A single structured diagnostic event."""

    name: str
    data: Dict[str, Any]


TraceSink = Callable[[TraceEvent], None]


def emit(trace: Optional[TraceSink], name: str, **data) -> None:
    """
    Build a :class:`TraceEvent` and deliver it to *trace* (if any).

    The event is logged at DEBUG level regardless of whether a sink is
    installed.
    """
    event = TraceEvent(name, data)
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("trace %s: %s", name, _summarize(data))
    if trace is not None:
        trace(event)


def _summarize(data: Dict[str, Any]) -> str:
    parts = []
    for key, value in data.items():
        shape = getattr(value, "shape", None)
        if shape is not None:
            parts.append(f"{key}=<array {shape}>")
        else:
            parts.append(f"{key}={value!r}")
    return ", ".join(parts)


class TraceRecorder:
    """
    In-memory trace sink.

    Pass an instance as the ``trace`` argument of any pipeline function;
    every event is appended to :attr:`events`.
    """

    def __init__(self) -> None:
        self.events: List[TraceEvent] = []

    def __call__(self, event: TraceEvent) -> None:
        self.events.append(event)

    def __iter__(self) -> Iterator[TraceEvent]:
        return iter(self.events)

    def __len__(self) -> int:
        return len(self.events)

    def named(self, name: str) -> List[TraceEvent]:
        """Return all recorded events called *name*, in emission order."""
        return [e for e in self.events if e.name == name]

    def last(self, name: str) -> TraceEvent:
        """
        Return the most recent event called *name*.

        Raises
        ------
        KeyError
            If no such event was recorded.
        """
        for event in reversed(self.events):
            if event.name == name:
                return event
        raise KeyError(f"No trace event named '{name}' was recorded.")

    def clear(self) -> None:
        self.events.clear()
