# read version from installed package
from importlib.metadata import version

__version__ = version("vtparse")

from . import formatter
from .parser import *
from .table import Action, State, Transition, TransitionTable, build_table, DEFAULT_TABLE
