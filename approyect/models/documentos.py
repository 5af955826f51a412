from datetime import datetime, timezone
from sqlalchemy import Column, String, JSON, DateTime
from approyect.core.database import Base


def _ahora():
    return datetime.now(timezone.utc)


# --- DOCUMENTO (almacén sin esquema) ---
# Cada fila es un documento de una colección: Usuarios, Asistencias, Solicitudes,
# AsistenciasAsignadas o Cursos. Las relaciones entre colecciones no se declaran aquí,
# las interpreta la capa de servicios al leer.
class Documento(Base):
    __tablename__ = "Documentos"

    coleccion = Column(String(60), primary_key=True, index=True)
    id = Column(String(40), primary_key=True, index=True)

    # Campos libres del documento
    datos = Column(JSON, nullable=False, default=dict)

    # Auditoría
    created_at = Column(DateTime(timezone=True), default=_ahora, nullable=False)
    modified_at = Column(DateTime(timezone=True), default=_ahora, onupdate=_ahora, nullable=False)
