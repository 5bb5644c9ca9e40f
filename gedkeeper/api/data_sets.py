"""Data set API endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlmodel import Session, select

from gedkeeper.config import settings
from gedkeeper.database import get_transactional_session
from gedkeeper.models import DataSet

router = APIRouter()


class DataSetCreate(BaseModel):
    name: str
    title: Optional[str] = None
    media_path: Optional[str] = None
    word_wrapped_notes: Optional[bool] = None
    generate_uids: Optional[bool] = None
    keep_media: Optional[bool] = None


def get_data_set(session: Session, name: str) -> DataSet:
    """Data set by name, or 404."""
    data_set = session.exec(select(DataSet).where(DataSet.name == name)).first()
    if not data_set:
        raise HTTPException(status_code=404, detail="Data set not found")
    return data_set


def _describe(data_set: DataSet) -> dict:
    return {
        "data_set_id": data_set.data_set_id,
        "name": data_set.name,
        "title": data_set.title,
        "media_path": data_set.media_path,
        "word_wrapped_notes": data_set.word_wrapped_notes,
        "generate_uids": data_set.generate_uids,
        "keep_media": data_set.keep_media,
    }


@router.post("")
async def create_data_set(
    body: DataSetCreate,
    session: Session = Depends(get_transactional_session),
) -> dict:
    """
    Create a data set.

    Preferences that are not given take their defaults from the settings.
    """
    if session.exec(select(DataSet).where(DataSet.name == body.name)).first():
        raise HTTPException(status_code=409, detail="Data set already exists")

    data_set = DataSet(
        name=body.name,
        title=body.title,
        media_path=body.media_path if body.media_path is not None else settings.default_media_path,
        word_wrapped_notes=(
            body.word_wrapped_notes
            if body.word_wrapped_notes is not None
            else settings.default_word_wrapped_notes
        ),
        generate_uids=(
            body.generate_uids if body.generate_uids is not None else settings.default_generate_uids
        ),
        keep_media=body.keep_media if body.keep_media is not None else settings.default_keep_media,
    )
    session.add(data_set)
    session.flush()
    return _describe(data_set)


@router.get("/{name}")
async def read_data_set(
    name: str,
    session: Session = Depends(get_transactional_session),
) -> dict:
    """Get data set preferences."""
    return _describe(get_data_set(session, name))
