from .account import account
from .user import user
from .project import project
from .evaluation import evaluation
from .invitation import invitation

__all__ = ["account", "user", "project", "evaluation", "invitation"]
