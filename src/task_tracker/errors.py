"""Domain errors raised by the services and mapped to HTTP responses by the web layer."""


class UserExistsError(ValueError):
    """Registration with an email that is already taken."""

    def __init__(self, email: str):
        super().__init__("User already exists")
        self.email = email


class TaskNotFoundError(LookupError):
    """Task does not exist or belongs to another user."""

    def __init__(self, task_id: int, user_id: int):
        super().__init__("Task not found")
        self.task_id = task_id
        self.user_id = user_id
