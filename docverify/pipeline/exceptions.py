from docverify.results import ServiceError


class PipelineError(Exception):
    """Base exception for a verification stage that did not succeed."""

    def __init__(self, stage: str, error: ServiceError) -> None:
        super().__init__(f"{stage} failed: {error.code}: {error.message}")
        self.stage = stage
        self.error = error


class RetryableStageError(PipelineError):
    """The stage failed transiently; the job may be attempted again."""


class StageFailedError(PipelineError):
    """The stage failed permanently for this document."""


def stage_error(stage: str, error: ServiceError) -> PipelineError:
    if error.code.retryable:
        return RetryableStageError(stage, error)
    return StageFailedError(stage, error)
