from docverify.config.settings import Settings
from docverify.database.connection import apply_schema, close_pool, init_pool
from docverify.database.repositories.job_repository import JobRepository
from docverify.logging.logger import Log
from docverify.pipeline.processor import build_processor
from docverify.worker.job_runner import JobRunner
from docverify.worker.worker import Worker


def main() -> None:
    """Entry point: initialize pool -> build dependencies -> start worker loop."""
    settings = Settings()
    Log.configure(settings.log_level)
    init_pool(settings)

    try:
        if settings.db_apply_schema:
            apply_schema()
        processor = build_processor(settings)
        job_repo = JobRepository(settings.max_job_attempts)
        job_runner = JobRunner(processor, job_repo, settings)
        worker = Worker(job_repo, job_runner, settings)
        worker.run()
    finally:
        close_pool()


if __name__ == "__main__":
    main()
