class MailcraftError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code = 500

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message


class Unauthorized(MailcraftError):
    status_code = 401

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message)


class PaymentRequired(MailcraftError):
    status_code = 402

    def __init__(self, message: str = "User has not paid or is out of credits"):
        super().__init__(message)


class NotFound(MailcraftError):
    status_code = 404


class TaskNotFound(NotFound):
    def __init__(self, task_id: str):
        super().__init__(f"Task not found: {task_id}")
        self.task_id = task_id


class TemplateNotFound(NotFound):
    def __init__(self, name: str):
        super().__init__(f"Template not found: {name}")
        self.name = name


class UpstreamFailure(MailcraftError):
    """LLM, provider, network or tool failure."""


class ImageSearchError(UpstreamFailure):
    pass
