"""
Modelos de base de datos (ORM).

Definen el esquema que gestiona Alembic. Los pipelines no usan el ORM:
acceden a la tabla via PostgREST o psycopg (ver infrastructure/external).
"""
from sqlalchemy import Column, Date, DateTime, Integer, String, Text, Time, UniqueConstraint
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func


# Base para modelos de SQLAlchemy
Base = declarative_base()


class EmployeeAttendanceModel(Base):
    """
    Asistencia de un empleado en un dia, importada desde Google Sheets.

    (sheet_source_id, sheet_row_number) es UNIQUE: es la red de seguridad
    contra inserts duplicados de corridas concurrentes.
    """

    __tablename__ = "employee_attendance"
    __table_args__ = (
        UniqueConstraint("sheet_source_id", "sheet_row_number", name="uq_employee_attendance_sheet_row"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    date = Column(Date, nullable=False, index=True)
    employee_id = Column(Text, nullable=False, index=True)
    employee_name = Column(Text, nullable=False)
    email_id = Column(Text, nullable=True)
    first_in = Column(Time, nullable=True)
    last_out = Column(Time, nullable=True)
    late_login = Column(Time, nullable=True)
    shift_name = Column(Text, nullable=True)
    sheet_source_id = Column(String(255), nullable=True)
    sheet_row_number = Column(Integer, nullable=True)
    sheet_synced_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return (
            f"<EmployeeAttendance(id={self.id}, date={self.date}, "
            f"employee_id={self.employee_id}, row={self.sheet_row_number})>"
        )
