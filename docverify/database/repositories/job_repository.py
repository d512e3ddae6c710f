from typing import Any

import psycopg
from psycopg.rows import dict_row

from docverify.database.connection import get_connection
from docverify.database.models import JobRecord

_COLUMNS = """
    id, document_id, tenant_id, status, attempts, error_message, locked_at,
    created_at, updated_at
"""


class JobRepository:
    """Database operations for the verification_jobs table."""

    def __init__(self, max_attempts: int) -> None:
        self._max_attempts = max_attempts

    def enqueue(self, document_id: str, tenant_id: str) -> int:
        """Queue a verification run for a document and return the job ID."""
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    INSERT INTO verification_jobs (document_id, tenant_id)
                    VALUES (%s, %s)
                    RETURNING id
                    """,
                    (document_id, tenant_id),
                )
                row = cur.fetchone()
            conn.commit()
        assert row is not None
        return int(row[0])

    def claim_next_job(self, conn: psycopg.Connection[Any]) -> JobRecord | None:
        """Claim the next pending job using SELECT FOR UPDATE SKIP LOCKED."""
        with conn.cursor(row_factory=dict_row) as cur:
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM verification_jobs
                WHERE status = 'pending'
                  AND attempts < %s
                ORDER BY created_at
                LIMIT 1
                FOR UPDATE SKIP LOCKED
                """,
                (self._max_attempts,),
            )
            row = cur.fetchone()

        if row is None:
            conn.commit()
            return None

        conn.execute(
            """
            UPDATE verification_jobs
            SET status = 'processing', locked_at = NOW(), updated_at = NOW()
            WHERE id = %s
            """,
            (row["id"],),
        )
        conn.commit()
        return _to_job({**row, "status": "processing"})

    def mark_done(self, job_id: int) -> None:
        self._set_status(job_id, "done")

    def mark_failed(self, job_id: int, error: str) -> None:
        """Mark a job as permanently failed."""
        self._set_status(job_id, "failed", error)

    def increment_attempts(self, job_id: int) -> None:
        """Increment attempt count and return job to pending."""
        with get_connection() as conn:
            conn.execute(
                """
                UPDATE verification_jobs
                SET attempts = attempts + 1, status = 'pending',
                    locked_at = NULL, updated_at = NOW()
                WHERE id = %s
                """,
                (job_id,),
            )
            conn.commit()

    def find_by_id(self, job_id: int) -> JobRecord | None:
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"SELECT {_COLUMNS} FROM verification_jobs WHERE id = %s",
                    (job_id,),
                )
                row = cur.fetchone()
        return _to_job(row) if row is not None else None

    def _set_status(self, job_id: int, status: str, error: str | None = None) -> None:
        with get_connection() as conn:
            conn.execute(
                """
                UPDATE verification_jobs
                SET status = %s,
                    error_message = COALESCE(%s, error_message),
                    updated_at = NOW()
                WHERE id = %s
                """,
                (status, error, job_id),
            )
            conn.commit()


def _to_job(row: dict[str, Any]) -> JobRecord:
    return JobRecord(
        id=row["id"],
        document_id=str(row["document_id"]),
        tenant_id=row["tenant_id"],
        status=row["status"],
        attempts=row["attempts"],
        error_message=row["error_message"],
        locked_at=row["locked_at"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )
