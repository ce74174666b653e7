from .completion import CompletionFlow, PendingMutation, should_show_completion_dialog
from .models import EditRecord, Goal, JournalLink, Milestone, Task
from .progress import effective_progress
from .service import GoalService, MutationResult
from .status import is_valid_status, migrate_status, valid_transitions
from .workflow import StatusWorkflow

__all__ = [
    "CompletionFlow",
    "EditRecord",
    "Goal",
    "GoalService",
    "JournalLink",
    "Milestone",
    "MutationResult",
    "PendingMutation",
    "StatusWorkflow",
    "Task",
    "effective_progress",
    "is_valid_status",
    "migrate_status",
    "should_show_completion_dialog",
    "valid_transitions",
]
