"""Interactive board core: state, grouping, focus, view modes, graph and relations."""

from .focus import FocusNavigator
from .grouping import ColumnGroup, group_issues
from .modes import ViewModeMachine
from .refresher import DataRefresher
from .relations import RelationPipeline
from .state import BoardState, EventBus, FilterDimension, ViewMode

__all__ = [
    "BoardState",
    "ColumnGroup",
    "DataRefresher",
    "EventBus",
    "FilterDimension",
    "FocusNavigator",
    "RelationPipeline",
    "ViewMode",
    "ViewModeMachine",
    "group_issues",
]
