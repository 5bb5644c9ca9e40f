"""Record API endpoints."""

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlmodel import Session

from gedkeeper.api.data_sets import get_data_set
from gedkeeper.database import get_transactional_session
from gedkeeper.ingestion.errors import InvalidGedcomRecordError
from gedkeeper.ingestion.importer import GedcomImporter
from gedkeeper.storage import RecordStore

router = APIRouter()


class RecordText(BaseModel):
    gedcom: str


@router.get("/{data_set_name}/{xref}")
async def get_record(
    data_set_name: str,
    xref: str,
    session: Session = Depends(get_transactional_session),
) -> dict:
    """Get the canonical GEDCOM text of a record."""
    data_set = get_data_set(session, data_set_name)
    gedcom = RecordStore(session, data_set).get_gedcom(xref)
    if gedcom is None:
        raise HTTPException(status_code=404, detail="Record not found")
    return {"xref": xref, "gedcom": gedcom}


@router.post("/{data_set_name}")
async def import_record(
    data_set_name: str,
    body: RecordText,
    session: Session = Depends(get_transactional_session),
) -> dict:
    """Import a single new record."""
    data_set = get_data_set(session, data_set_name)
    try:
        record = GedcomImporter(session, data_set).import_record(body.gedcom, update=True)
    except InvalidGedcomRecordError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return {"xref": record.xref, "record_type": record.record_type, "gedcom": record.gedcom}


@router.put("/{data_set_name}/{xref}")
async def update_record(
    data_set_name: str,
    xref: str,
    body: RecordText,
    session: Session = Depends(get_transactional_session),
) -> dict:
    """
    Replace a record.

    The record's indexes are rebuilt from the new text.
    """
    data_set = get_data_set(session, data_set_name)
    try:
        updated = GedcomImporter(session, data_set).update_record(body.gedcom)
    except InvalidGedcomRecordError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    if updated != xref:
        raise HTTPException(status_code=400, detail="Record text does not match the xref")
    return {"xref": xref, "gedcom": RecordStore(session, data_set).get_gedcom(xref)}


@router.delete("/{data_set_name}/{xref}")
async def delete_record(
    data_set_name: str,
    xref: str,
    session: Session = Depends(get_transactional_session),
) -> dict:
    """Delete a record and its index rows."""
    data_set = get_data_set(session, data_set_name)
    gedcom = RecordStore(session, data_set).get_gedcom(xref)
    if gedcom is None:
        raise HTTPException(status_code=404, detail="Record not found")
    GedcomImporter(session, data_set).delete_record(gedcom)
    return {"xref": xref, "deleted": True}
