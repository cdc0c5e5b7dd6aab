import uuid
from datetime import date, datetime

from sqlalchemy import (
    BigInteger,
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    SmallInteger,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    pass


class User(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    full_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    role: Mapped[str] = mapped_column(
        Enum("admin", "employee", name="user_role"),
        nullable=False,
        default="employee",
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    weekly_template: Mapped["WeeklyTemplate | None"] = relationship(
        "WeeklyTemplate", back_populates="employee", lazy="raise", uselist=False
    )
    attendance_records: Mapped[list["AttendanceRecord"]] = relationship(
        "AttendanceRecord", back_populates="employee", lazy="raise"
    )

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email} role={self.role}>"


class WeeklyTemplate(Base):
    __tablename__ = "weekly_templates"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    employee_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    employee: Mapped["User"] = relationship("User", back_populates="weekly_template")
    days: Mapped[list["WeeklyTemplateDay"]] = relationship(
        "WeeklyTemplateDay",
        back_populates="template",
        cascade="all, delete-orphan",
        order_by="WeeklyTemplateDay.day_of_week",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<WeeklyTemplate id={self.id} employee_id={self.employee_id}>"


class WeeklyTemplateDay(Base):
    __tablename__ = "weekly_template_days"

    __table_args__ = (
        UniqueConstraint("template_id", "day_of_week", name="uq_template_weekday"),
        CheckConstraint("day_of_week BETWEEN 0 AND 6", name="ck_template_weekday_range"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    template_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("weekly_templates.id", ondelete="CASCADE"),
        nullable=False,
    )
    # 0=Sunday .. 6=Saturday
    day_of_week: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    start_time: Mapped[str] = mapped_column(String(5), nullable=False)
    end_time: Mapped[str] = mapped_column(String(5), nullable=False)
    is_day_off: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    template: Mapped["WeeklyTemplate"] = relationship("WeeklyTemplate", back_populates="days")

    def __repr__(self) -> str:
        return (
            f"<WeeklyTemplateDay template_id={self.template_id} day_of_week={self.day_of_week} "
            f"{self.start_time}-{self.end_time} off={self.is_day_off}>"
        )


class ScheduleOverride(Base):
    __tablename__ = "schedule_overrides"

    __table_args__ = (
        UniqueConstraint("employee_id", "day", name="uq_override_employee_day"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    employee_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    day: Mapped[date] = mapped_column(Date, nullable=False)
    start_time: Mapped[str | None] = mapped_column(String(5), nullable=True)
    end_time: Mapped[str | None] = mapped_column(String(5), nullable=True)
    is_day_off: Mapped[bool] = mapped_column(Boolean, nullable=False)
    reason: Mapped[str | None] = mapped_column(String(500), nullable=True)

    def __repr__(self) -> str:
        return (
            f"<ScheduleOverride employee_id={self.employee_id} day={self.day} "
            f"off={self.is_day_off}>"
        )


class AttendanceRecord(Base):
    __tablename__ = "attendance_records"

    __table_args__ = (
        Index("ix_attendance_records_employee_time", "employee_id", "recorded_at"),
    )

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)
    employee_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    event_type: Mapped[str] = mapped_column(
        Enum("check_in", "check_out", name="attendance_event_type"), nullable=False
    )
    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)
    address: Mapped[str | None] = mapped_column(String(500), nullable=True)
    selfie_url: Mapped[str] = mapped_column(String(1000), nullable=False)
    device_fingerprint_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    is_suspicious: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    recorded_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    status: Mapped[str | None] = mapped_column(
        Enum("on_time", "late", name="attendance_status"), nullable=True
    )

    employee: Mapped["User"] = relationship("User", back_populates="attendance_records")

    def __repr__(self) -> str:
        return (
            f"<AttendanceRecord id={self.id} employee_id={self.employee_id} "
            f"event_type={self.event_type} status={self.status}>"
        )


class AbsenceRequest(Base):
    __tablename__ = "absence_requests"

    __table_args__ = (
        CheckConstraint("end_date >= start_date", name="ck_absence_period"),
        Index("ix_absence_requests_employee", "employee_id"),
        Index("ix_absence_requests_status", "status"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    employee_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    # sick, annual, personal, unpaid, other
    absence_type: Mapped[str] = mapped_column(String(50), nullable=False)
    reason: Mapped[str] = mapped_column(String(1000), nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    document_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    status: Mapped[str] = mapped_column(
        Enum("pending", "approved", "rejected", name="absence_status"),
        nullable=False,
        default="pending",
    )
    reviewed_by: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    reviewed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    def __repr__(self) -> str:
        return (
            f"<AbsenceRequest id={self.id} employee_id={self.employee_id} "
            f"{self.start_date}..{self.end_date} status={self.status}>"
        )


class OfficeLocation(Base):
    __tablename__ = "office_locations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)
    radius_m: Mapped[float] = mapped_column(Float, nullable=False)

    def __repr__(self) -> str:
        return f"<OfficeLocation id={self.id} name={self.name} radius_m={self.radius_m}>"


class DeviceFingerprint(Base):
    __tablename__ = "device_fingerprints"

    __table_args__ = (
        UniqueConstraint("employee_id", "device_id", name="uq_device_employee_device"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    employee_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    device_id: Mapped[str] = mapped_column(String(255), nullable=False)
    browser_info: Mapped[str | None] = mapped_column(String(500), nullable=True)
    os_info: Mapped[str | None] = mapped_column(String(500), nullable=True)
    ip_address: Mapped[str | None] = mapped_column(String(64), nullable=True)
    is_approved: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    last_seen_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    def __repr__(self) -> str:
        return (
            f"<DeviceFingerprint id={self.id} employee_id={self.employee_id} "
            f"device_id={self.device_id} approved={self.is_approved}>"
        )
