from __future__ import annotations

from typing import List, NamedTuple, Tuple

import pytest

from vtparse import Action, Parser


class Event(NamedTuple):
    action: Action
    char: int
    intermediate: bytes
    parameters: Tuple[int, ...]
    num_params: int
    overflow: bool


class Recorder:
    """Callback that snapshots the parser's collected data on every call."""

    def __init__(self) -> None:
        self.events: List[Event] = []

    def __call__(self, parser: Parser, action: Action, char: int) -> None:
        self.events.append(
            Event(
                action,
                char,
                parser.intermediate,
                parser.parameters,
                parser.num_params,
                parser.overflow,
            )
        )

    @property
    def actions(self) -> List[Tuple[Action, int]]:
        return [(e.action, e.char) for e in self.events]


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()


@pytest.fixture
def parser(recorder: Recorder) -> Parser:
    return Parser(recorder)


def run(data: bytes) -> List[Event]:
    rec = Recorder()
    Parser(rec).feed(data)
    return rec.events
