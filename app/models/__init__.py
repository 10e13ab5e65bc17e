from .user import User
from .category import Category
from .task import Task, TaskStatus, TaskStatusLog
