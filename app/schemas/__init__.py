from .category import CategoryCreate, CategoryUpdate, CategoryOut
from .task import TaskCreate, TaskUpdate, TaskOut, TaskDetailOut, StatusLogOut, CategoryBrief
from .analytics import CompletionRateOut, OverdueTasksOut
from .digest import UserDigest, DigestSummary
