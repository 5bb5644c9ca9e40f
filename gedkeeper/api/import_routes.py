"""Import API endpoints."""

import tempfile

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from sqlmodel import Session

from gedkeeper.api.data_sets import get_data_set
from gedkeeper.database import get_transactional_session
from gedkeeper.ingestion.importer import GedcomImporter
from gedkeeper.models import Run
from gedkeeper.ontology import JobStatus, JobType
from gedkeeper.worker.tasks import enqueue_task, run_gedcom_import

router = APIRouter()


@router.post("/{data_set_name}/gedcom")
async def import_gedcom(
    data_set_name: str,
    file: UploadFile = File(...),
    background: bool = False,
    session: Session = Depends(get_transactional_session),
) -> dict:
    """
    Import a GEDCOM file into a data set.

    The whole file is imported in one transaction. With background=true
    the import is queued for the worker and a run ID is returned.
    """
    if not file.filename.lower().endswith((".ged", ".gedcom")):
        raise HTTPException(status_code=400, detail="File must be a GEDCOM file (.ged or .gedcom)")

    data_set = get_data_set(session, data_set_name)
    content = await file.read()

    if background:
        # Save uploaded file for the worker
        with tempfile.NamedTemporaryFile(delete=False, suffix=".ged") as tmp_file:
            tmp_file.write(content)
            tmp_file_path = tmp_file.name

        run = Run(
            job_type=JobType.IMPORT_GEDCOM,
            status=JobStatus.QUEUED,
            config={"filename": file.filename, "data_set": data_set.name, "path": tmp_file_path},
        )
        session.add(run)
        session.flush()
        # The worker must see the run
        session.commit()

        job_id = enqueue_task(run_gedcom_import, str(run.run_id), data_set.data_set_id, tmp_file_path)
        return {"run_id": str(run.run_id), "job_id": job_id, "status": "queued"}

    importer = GedcomImporter(session, data_set)
    result = importer.import_text(content.decode("utf-8-sig", errors="replace"))
    return {"status": "completed", "result": result}
