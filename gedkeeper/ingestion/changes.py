"""
Pending changes: edits that wait for a moderator before they reach
the record tables.
"""

import logging
from typing import Optional

from sqlmodel import Session, select

from gedkeeper.ingestion.errors import ChangeStatusError
from gedkeeper.models import Change
from gedkeeper.ontology import ChangeStatus

logger = logging.getLogger(__name__)


class ChangeLog:
    """Append-only log of record revisions for one data set."""

    def __init__(self, session: Session, data_set_id: int):
        self.session = session
        self.data_set_id = data_set_id

    def submit(
        self,
        xref: str,
        old_gedcom: Optional[str],
        new_gedcom: Optional[str],
        user_name: Optional[str] = None,
    ) -> Change:
        """
        Record a revision. old_gedcom is None for a new record,
        new_gedcom is None for a deletion.
        """
        change = Change(
            data_set_id=self.data_set_id,
            xref=xref,
            old_gedcom=old_gedcom,
            new_gedcom=new_gedcom,
            user_name=user_name,
        )
        self.session.add(change)
        self.session.flush()
        return change

    def pending(self, xref: str) -> list[Change]:
        """Pending changes of a record, oldest first."""
        return list(
            self.session.exec(
                select(Change)
                .where(Change.data_set_id == self.data_set_id)
                .where(Change.xref == xref)
                .where(Change.status == ChangeStatus.PENDING)
                .order_by(Change.change_id)
            ).all()
        )

    def mark(self, change: Change, status: ChangeStatus) -> None:
        """Accept or reject a change. Both are final."""
        if change.status != ChangeStatus.PENDING:
            raise ChangeStatusError(change.change_id, ChangeStatus(change.status).value)
        change.status = status
        self.session.add(change)
        self.session.flush()
