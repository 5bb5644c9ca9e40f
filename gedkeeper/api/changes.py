"""Pending change API endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlmodel import Session

from gedkeeper.api.data_sets import get_data_set
from gedkeeper.database import get_transactional_session
from gedkeeper.ingestion.changes import ChangeLog
from gedkeeper.ingestion.errors import ChangeStatusError, InvalidGedcomRecordError
from gedkeeper.ingestion.importer import GedcomImporter

router = APIRouter()


class ChangeSubmission(BaseModel):
    old_gedcom: Optional[str] = None
    new_gedcom: Optional[str] = None
    user_name: Optional[str] = None


@router.post("/{data_set_name}/{xref}")
async def submit_change(
    data_set_name: str,
    xref: str,
    body: ChangeSubmission,
    session: Session = Depends(get_transactional_session),
) -> dict:
    """Submit an edit for moderation."""
    if body.old_gedcom is None and body.new_gedcom is None:
        raise HTTPException(status_code=400, detail="A change needs an old or a new record")

    data_set = get_data_set(session, data_set_name)
    change = ChangeLog(session, data_set.data_set_id).submit(
        xref, body.old_gedcom, body.new_gedcom, user_name=body.user_name
    )
    return {"change_id": change.change_id, "xref": xref, "status": change.status.value}


@router.get("/{data_set_name}/{xref}")
async def list_pending_changes(
    data_set_name: str,
    xref: str,
    session: Session = Depends(get_transactional_session),
) -> dict:
    """Pending changes of a record, oldest first."""
    data_set = get_data_set(session, data_set_name)
    changes = ChangeLog(session, data_set.data_set_id).pending(xref)
    return {
        "xref": xref,
        "changes": [
            {
                "change_id": change.change_id,
                "change_time": change.change_time.isoformat(),
                "user_name": change.user_name,
                "old_gedcom": change.old_gedcom,
                "new_gedcom": change.new_gedcom,
            }
            for change in changes
        ],
    }


@router.post("/{data_set_name}/{xref}/accept")
async def accept_changes(
    data_set_name: str,
    xref: str,
    session: Session = Depends(get_transactional_session),
) -> dict:
    """Apply all pending changes of a record."""
    data_set = get_data_set(session, data_set_name)
    try:
        accepted = GedcomImporter(session, data_set).accept_all_changes(xref)
    except InvalidGedcomRecordError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except ChangeStatusError as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    return {"xref": xref, "accepted": accepted}


@router.post("/{data_set_name}/{xref}/reject")
async def reject_changes(
    data_set_name: str,
    xref: str,
    session: Session = Depends(get_transactional_session),
) -> dict:
    """Discard all pending changes of a record."""
    data_set = get_data_set(session, data_set_name)
    rejected = GedcomImporter(session, data_set).reject_all_changes(xref)
    return {"xref": xref, "rejected": rejected}
