"""Terminal control sequence parser, following https://www.vt100.net/emu/dec_ansi_parser"""

from __future__ import annotations

import logging
from typing import IO, Any, Callable, Iterable, List, Optional, Tuple, Union

from .table import DEFAULT_TABLE, Action, State, TransitionTable

__all__ = ["Callback", "Parser"]

_LOG = logging.getLogger(__name__)

Callback = Callable[["Parser", Action, int], None]

# actions handed to the callback as-is; everything else is handled internally
_FORWARDED = frozenset(
    {
        Action.print,
        Action.execute,
        Action.hook,
        Action.put,
        Action.osc_start,
        Action.osc_put,
        Action.osc_end,
        Action.unhook,
        Action.csi_dispatch,
        Action.esc_dispatch,
    }
)


def _wrap_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    if value >= 0x80000000:
        value -= 0x100000000
    return value


class Parser:
    """Feeds bytes through the DEC ANSI state machine and reports actions.

    ``callback(parser, action, char)`` is invoked for every externally
    visible action. ``char`` is the byte that triggered the action, or 0 for
    actions run on entering or leaving a state. While the callback runs,
    :attr:`intermediate`, :attr:`parameters` and :attr:`overflow` describe the
    sequence collected so far. The callback must not call :meth:`feed` on the
    parser that invoked it.
    """

    MAX_INTERMEDIATE_CHARS = 2
    MAX_PARAMS = 16

    def __init__(
        self,
        callback: Optional[Callback] = None,
        table: TransitionTable = DEFAULT_TABLE,
        debug: bool = False,
    ):
        self._trans = table
        self._cb = callback
        self._enable_debug = debug
        self._dispatching = False

        self.state = State.ground
        self._intermediate = bytearray()
        self._params: List[int] = [0] * self.MAX_PARAMS
        # may grow past MAX_PARAMS; only the first MAX_PARAMS values are stored
        self._num_params = 0
        self._overflow = False

    def reset(self) -> None:
        self.state = State.ground
        self.clear()

    def clear(self) -> None:
        self._intermediate.clear()
        self._num_params = 0
        self._overflow = False

    @property
    def intermediate(self) -> bytes:
        return bytes(self._intermediate)

    @property
    def num_intermediate_chars(self) -> int:
        return len(self._intermediate)

    @property
    def parameters(self) -> Tuple[int, ...]:
        """The stored parameter values, never more than MAX_PARAMS."""
        return tuple(self._params[: min(self._num_params, self.MAX_PARAMS)])

    @property
    def num_params(self) -> int:
        """Number of parameters started since the last clear, including any
        past MAX_PARAMS that were counted but not stored."""
        return self._num_params

    @property
    def overflow(self) -> bool:
        """True if more than MAX_INTERMEDIATE_CHARS were collected since the
        last clear. Callers may treat the dispatched sequence as invalid."""
        return self._overflow

    def debug(self, msg: str, *args: Any) -> None:
        if self._enable_debug:
            _LOG.debug(msg, *args)

    def feed(self, data: Union[int, bytes, bytearray, memoryview, Iterable[int]]) -> None:
        if isinstance(data, str):
            raise TypeError("feed() expects bytes, not str")
        if isinstance(data, int):
            data = (data,)
        if self._dispatching:
            raise RuntimeError("feed() called from within the parser's own callback")
        self._dispatching = True
        try:
            for char in data:
                if not 0 <= char <= 0xFF:
                    raise ValueError(f"byte must be in range(0, 256), got {char!r}")
                self._advance(char)
        finally:
            self._dispatching = False

    def parse(self, stream: IO[bytes], chunk_size: int = 1024) -> None:
        """Read a binary stream until EOF, feeding each chunk as it arrives."""
        # read1 returns whatever is available instead of waiting for a full chunk
        read = getattr(stream, "read1", stream.read)
        while True:
            chunk = read(chunk_size)
            if not chunk:
                break
            self.feed(chunk)

    def _advance(self, char: int) -> None:
        new_state, action = self._trans.lookup(self.state, char)
        self.debug("0x%02x in %s -> %s, %s", char, self.state, new_state, action)

        # on a state change, run up to three actions:
        #  - exit action of the current state
        #  - transition action
        #  - entry action of the new state
        # the state is only updated after all of them ran
        if new_state is not None:
            exit_action = self._trans.exit_action(self.state)
            entry_action = self._trans.entry_action(new_state)
            if exit_action is not Action.none:
                self.debug("processing on_exit from %s", self.state)
                self.do_action(exit_action, 0)
            if action is not Action.none:
                self.do_action(action, char)
            if entry_action is not Action.none:
                self.debug("processing on_entry to %s", new_state)
                self.do_action(entry_action, 0)
            self.state = new_state
        else:
            # an unmapped byte (0xA0-0xFF) carries Action.none and reports error
            self.do_action(action, char)

    def do_action(
        self,
        action: Action,
        char: int,
        # optimization: avoid several dict lookups in Action per call by storing
        # these as local parameters when the function is defined
        ignore: Action = Action.ignore,
        clear: Action = Action.clear,
        collect: Action = Action.collect,
        param: Action = Action.param,
    ) -> None:
        if action in _FORWARDED:
            if self._cb is not None:
                self._cb(self, action, char)
        elif action is ignore:
            pass
        elif action is collect:
            if len(self._intermediate) + 1 > self.MAX_INTERMEDIATE_CHARS:
                self._overflow = True
            else:
                self._intermediate.append(char)
        elif action is param:
            if char == 0x3B:  # ;
                self._num_params += 1
                if self._num_params <= self.MAX_PARAMS:
                    self._params[self._num_params - 1] = 0
            else:
                if self._num_params == 0:
                    self._num_params = 1
                    self._params[0] = 0
                if self._num_params <= self.MAX_PARAMS:
                    i = self._num_params - 1
                    self._params[i] = _wrap_int32(self._params[i] * 10 + char - 0x30)
        elif action is clear:
            self.clear()
        else:
            self.debug("no action for 0x%02x in %s, reporting error", char, self.state)
            if self._cb is not None:
                self._cb(self, Action.error, 0)
