"""
Background tasks for RQ worker.

Long-running operations (file imports, bulk moderation) are executed as
background jobs. Each job's work runs in one transaction; the Run row
that tracks it is committed separately so that failures are recorded.
"""

import logging
from datetime import datetime
from uuid import UUID

from redis import Redis
from rq import Queue
from sqlmodel import Session

from gedkeeper.config import settings
from gedkeeper.database import engine, transaction
from gedkeeper.ingestion.importer import GedcomImporter
from gedkeeper.models import DataSet, Run
from gedkeeper.ontology import JobStatus

logger = logging.getLogger(__name__)

# Redis connection
redis_conn = Redis.from_url(settings.redis_url)

# RQ Queue
task_queue = Queue("gedkeeper", connection=redis_conn)


def _start(session: Session, run_id: str):
    run = session.get(Run, UUID(run_id))
    if not run:
        return None
    run.status = JobStatus.RUNNING
    run.started_at = datetime.utcnow()
    session.add(run)
    session.commit()
    return run


def _finish(session: Session, run: Run, result: dict) -> None:
    run.status = JobStatus.COMPLETED
    run.completed_at = datetime.utcnow()
    run.result_summary = result
    session.add(run)
    session.commit()


def _fail(session: Session, run: Run, error: Exception) -> None:
    run.status = JobStatus.FAILED
    run.completed_at = datetime.utcnow()
    run.error_message = str(error)
    session.add(run)
    session.commit()


def run_gedcom_import(run_id: str, data_set_id: int, file_path: str) -> dict:
    """
    Background task: GEDCOM file import.

    Args:
        run_id: Run identifier
        data_set_id: Target data set
        file_path: GEDCOM file to import

    Returns:
        Result summary
    """
    with Session(engine) as session:
        run = _start(session, run_id)
        if not run:
            return {"error": "Run not found"}

        try:
            data_set = session.get(DataSet, data_set_id)
            if not data_set:
                raise LookupError(f"Data set {data_set_id} not found")

            with transaction(session):
                result = GedcomImporter(session, data_set).import_file(file_path)

            _finish(session, run, result)
            return result

        except Exception as e:
            logger.exception("Import run %s failed", run_id)
            _fail(session, run, e)
            raise


def run_accept_changes(run_id: str, data_set_id: int, xref: str) -> dict:
    """
    Background task: accept the pending changes of a record.

    Args:
        run_id: Run identifier
        data_set_id: Data set of the record
        xref: Record identifier

    Returns:
        Result summary
    """
    with Session(engine) as session:
        run = _start(session, run_id)
        if not run:
            return {"error": "Run not found"}

        try:
            data_set = session.get(DataSet, data_set_id)
            if not data_set:
                raise LookupError(f"Data set {data_set_id} not found")

            with transaction(session):
                accepted = GedcomImporter(session, data_set).accept_all_changes(xref)

            result = {"xref": xref, "accepted": accepted}
            _finish(session, run, result)
            return result

        except Exception as e:
            logger.exception("Accept changes run %s failed", run_id)
            _fail(session, run, e)
            raise


# Helper to enqueue tasks
def enqueue_task(task_func, *args, **kwargs):
    """Enqueue a background task."""
    job = task_queue.enqueue(task_func, *args, **kwargs, job_timeout=settings.worker_timeout)
    return job.id
