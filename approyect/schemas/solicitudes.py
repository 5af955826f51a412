from pydantic import BaseModel, ConfigDict
from typing import Any, Optional, Union

Numero = Union[int, float, str]


# --- SOLICITUDES (postulación del estudiante) ---
class SolicitudCreate(BaseModel):
    tituloOportunidad: str
    userId: str
    nombre: Optional[str] = None
    correo: Optional[str] = None
    telefono: Optional[Any] = None
    promedio: Optional[Numero] = None
    horas: Optional[Numero] = None
    nota: Optional[Numero] = None
    comentarios: Optional[str] = None
    documento: Optional[str] = None


# --- ACCIONES DEL PROFESOR ---
class AsignacionRequest(BaseModel):
    """Datos del estudiante que se asigna; el cliente puede enviar campos extra."""
    userId: str
    tituloOportunidad: str = ""
    asistenciaId: Optional[str] = None
    pago: Optional[Numero] = None
    retroalimentacion: str = ""
    desempeno: str = ""
    fechaAsignacion: Optional[str] = None
    activo: bool = True

    model_config = ConfigDict(extra="allow")

class PostulacionAcciones(BaseModel):
    titulo: str
    estado: Optional[str] = None
    reunion: Optional[bool] = None

class FeedbackRequest(BaseModel):
    retroalimentacion: Optional[str] = None
    desempeno: Optional[Any] = None
