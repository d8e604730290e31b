"""
Configuración de base de datos.

Importa todos los modelos para que se registren con Base
antes de crear las tablas o generar migraciones.
"""
from attendance_sync.infrastructure.database.models import Base, EmployeeAttendanceModel

__all__ = ["Base", "EmployeeAttendanceModel"]
