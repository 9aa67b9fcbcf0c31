import uuid
from datetime import datetime, timezone
from sqlalchemy import (
    Column,
    String,
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    JSON,
    Integer,
    Text,
    Float,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from .database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BiocharLot(Base):
    __tablename__ = "biochar_lots"
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    lot_number = Column(String, nullable=False, unique=True, index=True)
    lot_name = Column(String)
    description = Column(Text)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)

    experiments = relationship(
        "Biochar",
        back_populates="lot",
        order_by="Biochar.experiment_number",
    )
    graphene_productions = relationship(
        "Graphene", back_populates="biochar_lot", passive_deletes=True
    )

    @property
    def experiment_count(self) -> int:
        return len(self.experiments)


class Biochar(Base):
    __tablename__ = "biochar_records"
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    experiment_number = Column(String, nullable=False, unique=True, index=True)
    test_order = Column(Integer)
    experiment_date = Column(Date)
    reactor = Column(String)
    raw_material = Column(String)
    starting_amount = Column(Float)
    acid_amount = Column(Float)
    acid_concentration = Column(Float)
    acid_molarity = Column(Float)
    acid_type = Column(String)
    temperature = Column(Float)
    time = Column(Float)
    pressure_initial = Column(Float)
    pressure_final = Column(Float)
    wash_amount = Column(Float)
    wash_medium = Column(String)
    output = Column(Float)
    drying_temp = Column(Float)
    kft_percentage = Column(Float)
    comments = Column(Text)
    lot_number = Column(
        String,
        ForeignKey("biochar_lots.lot_number", onupdate="CASCADE"),
        nullable=True,
        index=True,
    )
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)

    lot = relationship("BiocharLot", back_populates="experiments")
    graphene_productions = relationship(
        "Graphene", back_populates="biochar_source", passive_deletes=True
    )

    @property
    def graphene_count(self) -> int:
        return len(self.graphene_productions)


class GrapheneSemReport(Base):
    __tablename__ = "graphene_sem_reports"
    graphene_id = Column(
        UUID(as_uuid=True),
        ForeignKey("graphene_records.id", ondelete="CASCADE"),
        primary_key=True,
    )
    sem_report_id = Column(
        UUID(as_uuid=True),
        ForeignKey("sem_reports.id", ondelete="CASCADE"),
        primary_key=True,
    )
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    graphene = relationship("Graphene", back_populates="sem_links")
    sem_report = relationship("SemReport", back_populates="graphene_links")


class GrapheneUpdateReport(Base):
    __tablename__ = "graphene_update_reports"
    graphene_id = Column(
        UUID(as_uuid=True),
        ForeignKey("graphene_records.id", ondelete="CASCADE"),
        primary_key=True,
    )
    update_report_id = Column(
        UUID(as_uuid=True),
        ForeignKey("update_reports.id", ondelete="CASCADE"),
        primary_key=True,
    )
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    graphene = relationship("Graphene", back_populates="update_links")
    update_report = relationship("UpdateReport", back_populates="graphene_links")


class Graphene(Base):
    __tablename__ = "graphene_records"
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    experiment_number = Column(String, nullable=False, unique=True, index=True)
    test_order = Column(Integer)
    experiment_date = Column(Date)
    oven = Column(String)
    quantity = Column(Float)
    biochar_experiment = Column(
        String,
        ForeignKey(
            "biochar_records.experiment_number",
            onupdate="CASCADE",
            ondelete="SET NULL",
        ),
        nullable=True,
        index=True,
    )
    biochar_lot_number = Column(
        String,
        ForeignKey("biochar_lots.lot_number", onupdate="CASCADE"),
        nullable=True,
        index=True,
    )
    base_amount = Column(Float)
    base_type = Column(String)
    base_concentration = Column(Float)
    grinding_method = Column(String)
    grinding_time = Column(Float)
    homogeneous = Column(Boolean)
    gas = Column(String)
    temp_rate = Column(String)
    temp_max = Column(Float)
    time = Column(Float)
    wash_amount = Column(Float)
    wash_solution = Column(String)
    wash_concentration = Column(Float)
    wash_water = Column(String)
    drying_temp = Column(Float)
    drying_atmosphere = Column(String)
    drying_pressure = Column(String)
    volume_ml = Column(Float)
    density = Column(Float)
    species = Column(String)
    appearance_tags = Column(JSON, default=list)
    output = Column(Float)
    comments = Column(Text)
    objective = Column(Text, default="")
    experiment_details = Column(Text, default="")
    result = Column(Text, default="")
    conclusion = Column(Text, default="")
    recommended_action = Column(Text, default="")
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)

    biochar_source = relationship("Biochar", back_populates="graphene_productions")
    biochar_lot = relationship("BiocharLot", back_populates="graphene_productions")
    sem_links = relationship(
        "GrapheneSemReport",
        back_populates="graphene",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    update_links = relationship(
        "GrapheneUpdateReport",
        back_populates="graphene",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class BetTest(Base):
    __tablename__ = "bet_tests"
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    test_date = Column(Date)
    graphene_sample = Column(
        String,
        ForeignKey(
            "graphene_records.experiment_number",
            onupdate="CASCADE",
            ondelete="SET NULL",
        ),
        nullable=True,
        index=True,
    )
    multipoint_bet_area = Column(Float)
    langmuir_surface_area = Column(Float)
    species = Column(String)
    comments = Column(Text)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)

    graphene_ref = relationship("Graphene")


class ConductivityTest(Base):
    __tablename__ = "conductivity_tests"
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    test_date = Column(Date)
    graphene_sample = Column(
        String,
        ForeignKey(
            "graphene_records.experiment_number",
            onupdate="CASCADE",
            ondelete="SET NULL",
        ),
        nullable=True,
        index=True,
    )
    description = Column(Text)
    conductivity_1kn = Column(Float)
    conductivity_8kn = Column(Float)
    conductivity_12kn = Column(Float)
    conductivity_20kn = Column(Float)
    comments = Column(Text)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)

    graphene_ref = relationship("Graphene")


class RamanTest(Base):
    __tablename__ = "raman_tests"
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    test_date = Column(Date)
    graphene_sample = Column(
        String,
        ForeignKey(
            "graphene_records.experiment_number",
            onupdate="CASCADE",
            ondelete="SET NULL",
        ),
        nullable=True,
        index=True,
    )
    research_team = Column(String)
    testing_lab = Column(String)
    integration_range_2d_low = Column(Float)
    integration_range_2d_high = Column(Float)
    integration_range_g_low = Column(Float)
    integration_range_g_high = Column(Float)
    integration_range_d_low = Column(Float)
    integration_range_d_high = Column(Float)
    integration_range_dg_low = Column(Float)
    integration_range_dg_high = Column(Float)
    integral_typ_a_2d_1 = Column(Float)
    integral_typ_a_2d_2 = Column(Float)
    integral_typ_a_g_1 = Column(Float)
    integral_typ_a_g_2 = Column(Float)
    integral_typ_a_d_1 = Column(Float)
    integral_typ_a_d_2 = Column(Float)
    integral_typ_a_dg_1 = Column(Float)
    integral_typ_a_dg_2 = Column(Float)
    peak_high_typ_j_2d_1 = Column(Float)
    peak_high_typ_j_2d_2 = Column(Float)
    peak_high_typ_j_g_1 = Column(Float)
    peak_high_typ_j_g_2 = Column(Float)
    peak_high_typ_j_d_1 = Column(Float)
    peak_high_typ_j_d_2 = Column(Float)
    peak_high_typ_j_dg_1 = Column(Float)
    peak_high_typ_j_dg_2 = Column(Float)
    raman_report_path = Column(String)
    raman_report_name = Column(String)
    comments = Column(Text)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)

    graphene_ref = relationship("Graphene")

    @property
    def has_report(self) -> bool:
        return bool(self.raman_report_path)


class SemReport(Base):
    __tablename__ = "sem_reports"
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    filename = Column(String, nullable=False)
    original_name = Column(String, nullable=False)
    file_path = Column(String, nullable=False)
    file_size = Column(Integer)
    report_date = Column(Date)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)

    graphene_links = relationship(
        "GrapheneSemReport",
        back_populates="sem_report",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def graphene_records(self) -> list["Graphene"]:
        return [link.graphene for link in self.graphene_links]


class UpdateReport(Base):
    __tablename__ = "update_reports"
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    filename = Column(String, nullable=False)
    original_name = Column(String, nullable=False)
    file_path = Column(String, nullable=False)
    file_size = Column(Integer)
    description = Column(Text)
    week_of = Column(Date)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)

    graphene_links = relationship(
        "GrapheneUpdateReport",
        back_populates="update_report",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def graphene_records(self) -> list["Graphene"]:
        return [link.graphene for link in self.graphene_links]
