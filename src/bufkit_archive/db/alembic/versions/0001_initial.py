from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "sites",
        sa.Column("station_num", sa.Integer(), autoincrement=False, nullable=False),
        sa.Column("name", sa.String(), nullable=True),
        sa.Column("state", sa.String(), nullable=True),
        sa.Column("notes", sa.String(), nullable=True),
        sa.Column("auto_download", sa.Boolean(), nullable=False),
        sa.Column("tz_offset_seconds", sa.Integer(), nullable=True),
        sa.PrimaryKeyConstraint("station_num"),
    )
    op.create_table(
        "site_ids",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("station_num", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(
            ["station_num"],
            ["sites.station_num"],
            name="fk_site_ids_station",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "files",
        sa.Column("row_id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("station_num", sa.Integer(), nullable=False),
        sa.Column("model", sa.String(), nullable=False),
        sa.Column("init_time", sa.DateTime(), nullable=False),
        sa.Column("end_time", sa.DateTime(), nullable=False),
        sa.Column("file_name", sa.String(), nullable=False),
        sa.Column("site_id", sa.String(), nullable=True),
        sa.Column("lat", sa.Float(), nullable=True),
        sa.Column("lon", sa.Float(), nullable=True),
        sa.Column("elevation_m", sa.Float(), nullable=True),
        sa.ForeignKeyConstraint(
            ["station_num"],
            ["sites.station_num"],
            name="fk_files_station",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("row_id"),
        sa.UniqueConstraint("file_name"),
        sa.UniqueConstraint(
            "station_num", "model", "init_time", name="uq_files_station_model_init"
        ),
    )
    op.create_index(
        "idx_files_time_ranges",
        "files",
        ["model", "station_num", "init_time", "end_time"],
    )
    op.create_index("idx_site_ids_station", "site_ids", ["station_num"])


def downgrade() -> None:
    op.drop_index("idx_site_ids_station", table_name="site_ids")
    op.drop_index("idx_files_time_ranges", table_name="files")
    op.drop_table("files")
    op.drop_table("site_ids")
    op.drop_table("sites")
