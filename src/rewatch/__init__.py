"""rewatch: fine-grained reactive dependency tracking with batched updates."""

from importlib.metadata import version as _version

__version__ = _version("rewatch")

from rewatch.config import config
from rewatch.errors import ReactivityError, PathResolutionError, CircularUpdateError
from rewatch.subject import Subject
from rewatch.observer import Observer, Policy
from rewatch.scheduler import scheduler, flush, set_scheduler, get_pending_count
from rewatch.traverse import traverse
from rewatch.observable import Observable, ObservableList, ObservableDict
from rewatch.computed import Computed, computed
from rewatch.reaction import Reaction, autorun, reaction
from rewatch.action import action, transaction
from rewatch.owner import Owner
# textual is opt-in; import rewatch.textual explicitly

__all__ = [
    "config",
    "ReactivityError",
    "PathResolutionError",
    "CircularUpdateError",
    "Subject",
    "Observer",
    "Policy",
    "scheduler",
    "flush",
    "set_scheduler",
    "get_pending_count",
    "traverse",
    "Observable",
    "ObservableList",
    "ObservableDict",
    "Computed",
    "computed",
    "Reaction",
    "autorun",
    "reaction",
    "action",
    "transaction",
    "Owner",
]
