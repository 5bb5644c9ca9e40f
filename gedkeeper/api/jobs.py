"""Jobs API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from gedkeeper.api.data_sets import get_data_set
from gedkeeper.database import get_session
from gedkeeper.models import Run
from gedkeeper.ontology import JobStatus, JobType
from gedkeeper.worker.tasks import enqueue_task, run_accept_changes

router = APIRouter()


@router.get("/{job_id}")
async def get_job_status(
    job_id: UUID,
    session: Session = Depends(get_session),
) -> dict:
    """
    Get job status and results.

    Returns execution status and summary.
    """
    run = session.get(Run, job_id)
    if not run:
        raise HTTPException(status_code=404, detail="Job not found")

    return {
        "run_id": str(run.run_id),
        "job_type": run.job_type.value,
        "status": run.status.value,
        "created_at": run.created_at.isoformat(),
        "started_at": run.started_at.isoformat() if run.started_at else None,
        "completed_at": run.completed_at.isoformat() if run.completed_at else None,
        "config": run.config,
        "result_summary": run.result_summary,
        "error_message": run.error_message,
    }


@router.get("")
async def list_jobs(
    limit: int = 50,
    session: Session = Depends(get_session),
) -> dict:
    """
    List recent jobs.

    Returns job history ordered by creation time.
    """
    statement = select(Run).order_by(Run.created_at.desc()).limit(limit)
    runs = session.exec(statement).all()

    return {
        "jobs": [
            {
                "run_id": str(run.run_id),
                "job_type": run.job_type.value,
                "status": run.status.value,
                "created_at": run.created_at.isoformat(),
            }
            for run in runs
        ],
        "total": len(runs),
    }


@router.post("/accept/{data_set_name}/{xref}")
async def start_accept_changes(
    data_set_name: str,
    xref: str,
    session: Session = Depends(get_session),
) -> dict:
    """
    Start a job that accepts the pending changes of a record.

    Queues background job for execution.
    """
    data_set = get_data_set(session, data_set_name)

    # Create run record
    run = Run(
        job_type=JobType.ACCEPT_CHANGES,
        status=JobStatus.QUEUED,
        config={"data_set": data_set.name, "xref": xref},
    )
    session.add(run)
    session.commit()
    session.refresh(run)

    # Enqueue task
    job_id = enqueue_task(run_accept_changes, str(run.run_id), data_set.data_set_id, xref)

    return {
        "run_id": str(run.run_id),
        "job_id": job_id,
        "status": "queued",
        "message": "Accept changes job queued",
    }
