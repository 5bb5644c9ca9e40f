"""add index table indexes

Revision ID: 001_indexes
Revises:
Create Date: 2026-10-18

"""

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision = "001_indexes"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Index rows are looked up and deleted by record
    op.create_index("idx_dates_record", "dates", ["data_set_id", "xref"])
    op.create_index("idx_names_record", "names", ["data_set_id", "xref"])
    op.create_index("idx_placelinks_record", "placelinks", ["data_set_id", "xref"])

    # Searches
    op.create_index("idx_dates_julian_day", "dates", ["data_set_id", "julian_day1", "julian_day2"])
    op.create_index("idx_dates_fact", "dates", ["data_set_id", "fact"])
    op.create_index("idx_names_surn", "names", ["data_set_id", "surn"])
    op.create_index("idx_names_soundex_surn_std", "names", ["soundex_surn_std"])
    op.create_index("idx_places_soundex_std", "places", ["std_soundex"])

    # Reverse links ("who links to this record?")
    op.create_index("idx_links_to", "links", ["data_set_id", "to_xref", "link_type"])

    # Moderation queue
    op.create_index("idx_changes_pending", "changes", ["data_set_id", "status", "xref"])

    # Media de-duplication on inline media conversion
    op.create_index("idx_media_files_file_title", "media_files", ["data_set_id", "filename", "title"])


def downgrade() -> None:
    op.drop_index("idx_dates_record", "dates")
    op.drop_index("idx_names_record", "names")
    op.drop_index("idx_placelinks_record", "placelinks")
    op.drop_index("idx_dates_julian_day", "dates")
    op.drop_index("idx_dates_fact", "dates")
    op.drop_index("idx_names_surn", "names")
    op.drop_index("idx_names_soundex_surn_std", "names")
    op.drop_index("idx_places_soundex_std", "places")
    op.drop_index("idx_links_to", "links")
    op.drop_index("idx_changes_pending", "changes")
    op.drop_index("idx_media_files_file_title", "media_files")
