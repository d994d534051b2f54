"""State transition table for the DEC ANSI parser, following
https://www.vt100.net/emu/dec_ansi_parser"""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Dict, List, Mapping, NamedTuple, Optional, Tuple, Union

__all__ = [
    "State",
    "Action",
    "Transition",
    "TransitionTable",
    "build_table",
    "DEFAULT_TABLE",
]


# "no state change" is denoted by None in Transition.target
class State(Enum):
    csi_entry = 1
    csi_ignore = 2
    csi_intermediate = 3
    csi_param = 4
    dcs_entry = 5
    dcs_ignore = 6
    dcs_intermediate = 7
    dcs_param = 8
    dcs_passthrough = 9
    escape = 10
    escape_intermediate = 11
    ground = 12
    osc_string = 13
    sos_pm_apc_string = 14

    def __str__(self) -> str:
        return self.name.upper()


class Action(Enum):
    none = 0
    clear = 1
    collect = 2
    csi_dispatch = 3
    esc_dispatch = 4
    execute = 5
    hook = 6
    ignore = 7
    osc_end = 8
    osc_put = 9
    osc_start = 10
    param = 11
    print = 12
    put = 13
    unhook = 14
    error = 15

    def __str__(self) -> str:
        if self is Action.none:
            return "<no action>"
        return self.name.upper()


class Transition(NamedTuple):
    # if None, will stay in current state
    target: Optional[State]
    action: Action


NO_TRANSITION = Transition(None, Action.none)


def do(action: Action) -> Transition:
    return Transition(target=None, action=action)


def to(state: State, action: Action = Action.none) -> Transition:
    return Transition(target=state, action=action)


class byterange(NamedTuple):
    start: int
    stop: int


class Indexer:
    """``r[0x20:0x2F, 0x7F]`` builds a tuple of inclusive byte ranges."""

    # pylint: disable=too-few-public-methods
    def __getitem__(
        self, key: Union[int, slice, Tuple[Union[int, slice], ...]]
    ) -> Tuple[byterange, ...]:
        if not isinstance(key, tuple):
            key = (key,)
        return tuple(
            byterange(x.start, x.stop) if isinstance(x, slice) else byterange(x, x)
            for x in key
        )


r = Indexer()

RangeTransitions = Dict[Tuple[byterange, ...], Transition]

S = State
A = Action

csi_entry = S.csi_entry
csi_ignore = S.csi_ignore
csi_intermediate = S.csi_intermediate
csi_param = S.csi_param
dcs_entry = S.dcs_entry
dcs_ignore = S.dcs_ignore
dcs_intermediate = S.dcs_intermediate
dcs_param = S.dcs_param
dcs_passthrough = S.dcs_passthrough
escape = S.escape
escape_intermediate = S.escape_intermediate
ground = S.ground
osc_string = S.osc_string
sos_pm_apc_string = S.sos_pm_apc_string

# installed first in every state; per-state rules below overwrite them
anywhere_table: RangeTransitions = {
    # CAN, SUB
    r[0x18, 0x1A]: to(ground, A.execute),
    # C1 controls without a string or sequence of their own
    r[0x80:0x8F, 0x91:0x97, 0x99, 0x9A]: to(ground, A.execute),
    # ST
    r[0x9C]: to(ground),
    r[0x1B]: to(escape),
    # SOS, PM, APC
    r[0x98, 0x9E, 0x9F]: to(sos_pm_apc_string),
    r[0x90]: to(dcs_entry),
    r[0x9D]: to(osc_string),
    r[0x9B]: to(csi_entry),
}
r_normal_c0 = r[0x00:0x17, 0x19, 0x1C:0x1F]

range_table: Dict[State, RangeTransitions] = {
    ground: {r_normal_c0: do(A.execute), r[0x20:0x7F]: do(A.print)},
    escape: {
        r_normal_c0: do(A.execute),
        r[0x7F]: do(A.ignore),
        r[0x20:0x2F]: to(escape_intermediate, A.collect),
        r[0x30:0x4F, 0x51:0x57, 0x59, 0x5A, 0x5C, 0x60:0x7E]: to(
            ground, A.esc_dispatch
        ),
        r[0x5B]: to(csi_entry),
        r[0x5D]: to(osc_string),
        r[0x50]: to(dcs_entry),
        r[0x58, 0x5E, 0x5F]: to(sos_pm_apc_string),
    },
    escape_intermediate: {
        r_normal_c0: do(A.execute),
        r[0x20:0x2F]: do(A.collect),
        r[0x7F]: do(A.ignore),
        r[0x30:0x7E]: to(ground, A.esc_dispatch),
    },
    csi_entry: {
        r_normal_c0: do(A.execute),
        r[0x7F]: do(A.ignore),
        r[0x20:0x2F]: to(csi_intermediate, A.collect),
        # sub-parameters are not supported
        r[0x3A]: to(csi_ignore),
        r[0x30:0x39, 0x3B]: to(csi_param, A.param),
        # private markers
        r[0x3C:0x3F]: to(csi_param, A.collect),
        r[0x40:0x7E]: to(ground, A.csi_dispatch),
    },
    csi_ignore: {
        r_normal_c0: do(A.execute),
        r[0x20:0x3F, 0x7F]: do(A.ignore),
        r[0x40:0x7E]: to(ground),
    },
    csi_param: {
        r_normal_c0: do(A.execute),
        r[0x30:0x39, 0x3B]: do(A.param),
        r[0x7F]: do(A.ignore),
        r[0x3A, 0x3C:0x3F]: to(csi_ignore),
        r[0x20:0x2F]: to(csi_intermediate, A.collect),
        r[0x40:0x7E]: to(ground, A.csi_dispatch),
    },
    csi_intermediate: {
        r_normal_c0: do(A.execute),
        r[0x20:0x2F]: do(A.collect),
        r[0x7F]: do(A.ignore),
        r[0x30:0x3F]: to(csi_ignore),
        r[0x40:0x7E]: to(ground, A.csi_dispatch),
    },
    dcs_entry: {
        r_normal_c0: do(A.ignore),
        r[0x7F]: do(A.ignore),
        r[0x3A]: to(dcs_ignore),
        r[0x20:0x2F]: to(dcs_intermediate, A.collect),
        r[0x30:0x39, 0x3B]: to(dcs_param, A.param),
        r[0x3C:0x3F]: to(dcs_param, A.collect),
        r[0x40:0x7E]: to(dcs_passthrough),
    },
    dcs_ignore: {
        r_normal_c0: do(A.ignore),
        r[0x20:0x7F]: do(A.ignore),
    },
    dcs_intermediate: {
        r_normal_c0: do(A.ignore),
        r[0x20:0x2F]: do(A.collect),
        r[0x7F]: do(A.ignore),
        r[0x30:0x3F]: to(dcs_ignore),
        r[0x40:0x7E]: to(dcs_passthrough),
    },
    dcs_param: {
        r_normal_c0: do(A.ignore),
        r[0x30:0x39, 0x3B]: do(A.param),
        r[0x7F]: do(A.ignore),
        r[0x3A, 0x3C:0x3F]: to(dcs_ignore),
        r[0x20:0x2F]: to(dcs_intermediate, A.collect),
        r[0x40:0x7E]: to(dcs_passthrough),
    },
    dcs_passthrough: {
        r_normal_c0: do(A.put),
        r[0x20:0x7E]: do(A.put),
        r[0x7F]: do(A.ignore),
    },
    # NB: BEL does not terminate an OSC string here, only ST/CAN/SUB/ESC do
    osc_string: {
        r_normal_c0: do(A.ignore),
        r[0x20:0x7F]: do(A.osc_put),
    },
    sos_pm_apc_string: {
        r_normal_c0: do(A.ignore),
        r[0x20:0x7F]: do(A.ignore),
    },
}

on_entry: Dict[State, Action] = {
    csi_entry: A.clear,
    dcs_entry: A.clear,
    dcs_passthrough: A.hook,
    escape: A.clear,
    osc_string: A.osc_start,
}

on_exit: Dict[State, Action] = {
    dcs_passthrough: A.unhook,
    osc_string: A.osc_end,
}


class TransitionTable(NamedTuple):
    """Dense, read-only lookup of (state, byte) -> Transition, plus the
    actions run when entering and leaving each state.

    Built once by :func:`build_table` and shared by any number of parsers.
    """

    transitions: Mapping[State, Tuple[Transition, ...]]
    on_entry: Mapping[State, Action]
    on_exit: Mapping[State, Action]

    def lookup(self, state: State, byte: int) -> Transition:
        return self.transitions[state][byte]

    def entry_action(self, state: State) -> Action:
        return self.on_entry[state]

    def exit_action(self, state: State) -> Action:
        return self.on_exit[state]


def store_transitions(l: List[Transition], rt: RangeTransitions) -> None:
    for ranges, trans in rt.items():
        for br in ranges:
            for i in range(br.start, br.stop + 1):
                l[i] = trans


def expand_table(
    state_table: Dict[State, RangeTransitions], anywhere: RangeTransitions
) -> Dict[State, Tuple[Transition, ...]]:
    # transition lists are dense on 00-FF; bytes no rule covers keep NO_TRANSITION
    t: Dict[State, Tuple[Transition, ...]] = {}
    for state in State:
        l = [NO_TRANSITION] * 0x100
        store_transitions(l, anywhere)
        store_transitions(l, state_table.get(state, {}))
        t[state] = tuple(l)
    return t


def build_table(
    state_table: Optional[Dict[State, RangeTransitions]] = None,
    anywhere: Optional[RangeTransitions] = None,
) -> TransitionTable:
    if state_table is None:
        state_table = range_table
    if anywhere is None:
        anywhere = anywhere_table
    return TransitionTable(
        transitions=MappingProxyType(expand_table(state_table, anywhere)),
        on_entry=MappingProxyType({s: on_entry.get(s, A.none) for s in State}),
        on_exit=MappingProxyType({s: on_exit.get(s, A.none) for s in State}),
    )


DEFAULT_TABLE = build_table()
