from __future__ import annotations

from typing import Sequence

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "20261018_01"
down_revision: str | Sequence[str] | None = None
branch_labels = None
depends_on = None

_RAMAN_BANDS = ("2d", "g", "d", "dg")


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def _graphene_sample_column() -> sa.Column:
    return sa.Column(
        "graphene_sample",
        sa.String(),
        sa.ForeignKey(
            "graphene_records.experiment_number",
            onupdate="CASCADE",
            ondelete="SET NULL",
        ),
        nullable=True,
    )


def _raman_columns() -> list[sa.Column]:
    columns = []
    for band in _RAMAN_BANDS:
        columns.append(sa.Column(f"integration_range_{band}_low", sa.Float(), nullable=True))
        columns.append(sa.Column(f"integration_range_{band}_high", sa.Float(), nullable=True))
    for prefix in ("integral_typ_a", "peak_high_typ_j"):
        for band in _RAMAN_BANDS:
            columns.append(sa.Column(f"{prefix}_{band}_1", sa.Float(), nullable=True))
            columns.append(sa.Column(f"{prefix}_{band}_2", sa.Float(), nullable=True))
    return columns


def upgrade() -> None:
    """Create biochar, graphene, characterization, and report tables."""

    op.create_table(
        "biochar_lots",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("lot_number", sa.String(), nullable=False),
        sa.Column("lot_name", sa.String(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index(
        "ix_biochar_lots_lot_number", "biochar_lots", ["lot_number"], unique=True
    )

    op.create_table(
        "biochar_records",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("experiment_number", sa.String(), nullable=False),
        sa.Column("test_order", sa.Integer(), nullable=True),
        sa.Column("experiment_date", sa.Date(), nullable=True),
        sa.Column("reactor", sa.String(), nullable=True),
        sa.Column("raw_material", sa.String(), nullable=True),
        sa.Column("starting_amount", sa.Float(), nullable=True),
        sa.Column("acid_amount", sa.Float(), nullable=True),
        sa.Column("acid_concentration", sa.Float(), nullable=True),
        sa.Column("acid_molarity", sa.Float(), nullable=True),
        sa.Column("acid_type", sa.String(), nullable=True),
        sa.Column("temperature", sa.Float(), nullable=True),
        sa.Column("time", sa.Float(), nullable=True),
        sa.Column("pressure_initial", sa.Float(), nullable=True),
        sa.Column("pressure_final", sa.Float(), nullable=True),
        sa.Column("wash_amount", sa.Float(), nullable=True),
        sa.Column("wash_medium", sa.String(), nullable=True),
        sa.Column("output", sa.Float(), nullable=True),
        sa.Column("drying_temp", sa.Float(), nullable=True),
        sa.Column("kft_percentage", sa.Float(), nullable=True),
        sa.Column("comments", sa.Text(), nullable=True),
        sa.Column(
            "lot_number",
            sa.String(),
            sa.ForeignKey("biochar_lots.lot_number", onupdate="CASCADE"),
            nullable=True,
        ),
        *_timestamps(),
    )
    op.create_index(
        "ix_biochar_records_experiment_number",
        "biochar_records",
        ["experiment_number"],
        unique=True,
    )
    op.create_index("ix_biochar_records_lot_number", "biochar_records", ["lot_number"])

    op.create_table(
        "graphene_records",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("experiment_number", sa.String(), nullable=False),
        sa.Column("test_order", sa.Integer(), nullable=True),
        sa.Column("experiment_date", sa.Date(), nullable=True),
        sa.Column("oven", sa.String(), nullable=True),
        sa.Column("quantity", sa.Float(), nullable=True),
        sa.Column(
            "biochar_experiment",
            sa.String(),
            sa.ForeignKey(
                "biochar_records.experiment_number",
                onupdate="CASCADE",
                ondelete="SET NULL",
            ),
            nullable=True,
        ),
        sa.Column(
            "biochar_lot_number",
            sa.String(),
            sa.ForeignKey("biochar_lots.lot_number", onupdate="CASCADE"),
            nullable=True,
        ),
        sa.Column("base_amount", sa.Float(), nullable=True),
        sa.Column("base_type", sa.String(), nullable=True),
        sa.Column("base_concentration", sa.Float(), nullable=True),
        sa.Column("grinding_method", sa.String(), nullable=True),
        sa.Column("grinding_time", sa.Float(), nullable=True),
        sa.Column("homogeneous", sa.Boolean(), nullable=True),
        sa.Column("gas", sa.String(), nullable=True),
        sa.Column("temp_rate", sa.String(), nullable=True),
        sa.Column("temp_max", sa.Float(), nullable=True),
        sa.Column("time", sa.Float(), nullable=True),
        sa.Column("wash_amount", sa.Float(), nullable=True),
        sa.Column("wash_solution", sa.String(), nullable=True),
        sa.Column("wash_concentration", sa.Float(), nullable=True),
        sa.Column("wash_water", sa.String(), nullable=True),
        sa.Column("drying_temp", sa.Float(), nullable=True),
        sa.Column("drying_atmosphere", sa.String(), nullable=True),
        sa.Column("drying_pressure", sa.String(), nullable=True),
        sa.Column("volume_ml", sa.Float(), nullable=True),
        sa.Column("density", sa.Float(), nullable=True),
        sa.Column("species", sa.String(), nullable=True),
        sa.Column("appearance_tags", sa.JSON(), nullable=True),
        sa.Column("output", sa.Float(), nullable=True),
        sa.Column("comments", sa.Text(), nullable=True),
        sa.Column("objective", sa.Text(), nullable=True),
        sa.Column("experiment_details", sa.Text(), nullable=True),
        sa.Column("result", sa.Text(), nullable=True),
        sa.Column("conclusion", sa.Text(), nullable=True),
        sa.Column("recommended_action", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index(
        "ix_graphene_records_experiment_number",
        "graphene_records",
        ["experiment_number"],
        unique=True,
    )
    op.create_index(
        "ix_graphene_records_biochar_experiment", "graphene_records", ["biochar_experiment"]
    )
    op.create_index(
        "ix_graphene_records_biochar_lot_number", "graphene_records", ["biochar_lot_number"]
    )

    op.create_table(
        "bet_tests",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("test_date", sa.Date(), nullable=True),
        _graphene_sample_column(),
        sa.Column("multipoint_bet_area", sa.Float(), nullable=True),
        sa.Column("langmuir_surface_area", sa.Float(), nullable=True),
        sa.Column("species", sa.String(), nullable=True),
        sa.Column("comments", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_table(
        "conductivity_tests",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("test_date", sa.Date(), nullable=True),
        _graphene_sample_column(),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("conductivity_1kn", sa.Float(), nullable=True),
        sa.Column("conductivity_8kn", sa.Float(), nullable=True),
        sa.Column("conductivity_12kn", sa.Float(), nullable=True),
        sa.Column("conductivity_20kn", sa.Float(), nullable=True),
        sa.Column("comments", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_table(
        "raman_tests",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("test_date", sa.Date(), nullable=True),
        _graphene_sample_column(),
        sa.Column("research_team", sa.String(), nullable=True),
        sa.Column("testing_lab", sa.String(), nullable=True),
        *_raman_columns(),
        sa.Column("raman_report_path", sa.String(), nullable=True),
        sa.Column("raman_report_name", sa.String(), nullable=True),
        sa.Column("comments", sa.Text(), nullable=True),
        *_timestamps(),
    )
    for table in ("bet_tests", "conductivity_tests", "raman_tests"):
        op.create_index(f"ix_{table}_graphene_sample", table, ["graphene_sample"])

    op.create_table(
        "sem_reports",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("filename", sa.String(), nullable=False),
        sa.Column("original_name", sa.String(), nullable=False),
        sa.Column("file_path", sa.String(), nullable=False),
        sa.Column("file_size", sa.Integer(), nullable=True),
        sa.Column("report_date", sa.Date(), nullable=True),
        *_timestamps(),
    )
    op.create_table(
        "update_reports",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("filename", sa.String(), nullable=False),
        sa.Column("original_name", sa.String(), nullable=False),
        sa.Column("file_path", sa.String(), nullable=False),
        sa.Column("file_size", sa.Integer(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("week_of", sa.Date(), nullable=True),
        *_timestamps(),
    )
    op.create_table(
        "graphene_sem_reports",
        sa.Column(
            "graphene_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("graphene_records.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "sem_report_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("sem_reports.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_table(
        "graphene_update_reports",
        sa.Column(
            "graphene_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("graphene_records.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "update_report_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("update_reports.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )


def downgrade() -> None:
    op.drop_table("graphene_update_reports")
    op.drop_table("graphene_sem_reports")
    op.drop_table("update_reports")
    op.drop_table("sem_reports")
    for table in ("raman_tests", "conductivity_tests", "bet_tests"):
        op.drop_index(f"ix_{table}_graphene_sample", table_name=table)
        op.drop_table(table)
    op.drop_index("ix_graphene_records_biochar_lot_number", table_name="graphene_records")
    op.drop_index("ix_graphene_records_biochar_experiment", table_name="graphene_records")
    op.drop_index("ix_graphene_records_experiment_number", table_name="graphene_records")
    op.drop_table("graphene_records")
    op.drop_index("ix_biochar_records_lot_number", table_name="biochar_records")
    op.drop_index("ix_biochar_records_experiment_number", table_name="biochar_records")
    op.drop_table("biochar_records")
    op.drop_index("ix_biochar_lots_lot_number", table_name="biochar_lots")
    op.drop_table("biochar_lots")
