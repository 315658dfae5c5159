"""Domain-specific exceptions."""


class ServiceError(Exception):
    pass


class EvaluationError(ServiceError):
    """The remote evaluator rejected the expression or could not be reached."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
