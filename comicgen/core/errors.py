class ComicGenError(Exception):
    """Base class for pipeline errors."""


class JobNotFound(ComicGenError):
    def __init__(self, cache_id: str):
        super().__init__(f"Comic generation not found: {cache_id}")
        self.cache_id = cache_id


class DuplicateJob(ComicGenError):
    """Raised when a record with the same fingerprint already exists."""


class InvariantViolation(ComicGenError):
    """A job record is in a shape the pipeline cannot repair by retrying."""


class StepNotFound(InvariantViolation):
    def __init__(self, step_name: str):
        super().__init__(f"Invalid step key: {step_name}")
        self.step_name = step_name


class StepsMissing(InvariantViolation):
    def __init__(self, cache_id: str):
        super().__init__(f"Steps array is missing for {cache_id}")


class JobAlreadyFailed(InvariantViolation):
    def __init__(self, step_name: str, failed_step: str):
        super().__init__(f"Cannot advance '{step_name}': step '{failed_step}' has failed")


class StageError(ComicGenError):
    """Failure raised by a stage executor.

    ``retriable`` tells the retry loop whether another attempt can help.
    """
    retriable = True

    def __init__(self, message: str, retriable: bool | None = None):
        super().__init__(message)
        if retriable is not None:
            self.retriable = retriable


class InvalidUrl(StageError):
    retriable = False


class InvalidStageResult(StageError):
    """A collaborator returned something that failed validation."""


class FetchError(StageError):
    pass


class GenerationError(StageError):
    pass


class SynthesisError(StageError):
    pass


class StageTimeout(StageError):
    retriable = False
