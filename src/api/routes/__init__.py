from api.routes.commits import MyCommitController, UserCommitController
from api.routes.problems import ProblemController, UserController

__all__ = ["MyCommitController", "ProblemController", "UserCommitController", "UserController"]
