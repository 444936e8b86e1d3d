class EvaluatorError(Exception):
    """Base class for errors raised by the evaluation service."""


class DocumentNotFoundError(EvaluatorError, KeyError):
    def __str__(self) -> str:
        # KeyError wraps its message in quotes otherwise
        return str(self.args[0]) if self.args else "document not found"


class JobNotFoundError(EvaluatorError, KeyError):
    def __str__(self) -> str:
        return str(self.args[0]) if self.args else "job not found"


class InvalidTransitionError(EvaluatorError):
    pass


class QueueError(EvaluatorError):
    pass


class ExtractionError(EvaluatorError):
    pass


class ModelClientError(EvaluatorError):
    pass
