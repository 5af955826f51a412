from pydantic import BaseModel, ConfigDict
from typing import Any, Dict, List, Optional, Union

Numero = Union[int, float, str]


# --- ADMINISTRACIÓN ---
class AceptarOfertaRequest(BaseModel):
    id: str

class ActualizarOfertaRequest(BaseModel):
    # El cliente envía el título de la asistencia en 'nombreUsuario'
    nombreUsuario: str
    campoSeleccionado: str
    nuevoValor: Any


# --- PROFESORES ---
class NuevaOfertaProfesor(BaseModel):
    nombrePrograma: str
    tipo: str
    fechaInicio: str
    fechaCierre: str
    horasSemanal: Numero
    vacantes: Numero
    requisitos: str = ""
    beneficios: Optional[str] = None
    descripcion: Optional[str] = None
    horario: Optional[str] = None
    objetivos: Optional[str] = None
    semestre: Optional[str] = None
    departamento: Optional[str] = None
    promedioRequerido: Optional[Numero] = None
    totalHoras: Optional[Numero] = None
    requisitosAdicionales: Optional[str] = None

class OfertaUpdate(BaseModel):
    """Campos libres; si trae 'estado' pasa por la guardia de transiciones."""
    model_config = ConfigDict(extra="allow")

class DesempenoRequest(BaseModel):
    desempeno: Optional[Any] = None
    retroalimentacion: Optional[str] = None

class SeguimientoUpdate(BaseModel):
    tutoriasCumplidas: Optional[Numero] = None
    asistenciasCumplidas: Optional[Numero] = None
    cumplimientoTareas: Optional[Numero] = None
    tutoriasPorCumplir: Optional[Numero] = None
    asistenciasPorCumplir: Optional[Numero] = None
    tareasPorCumplir: Optional[Numero] = None


# --- ESCUELAS ---
class OfertaEscuela(BaseModel):
    id: str                      # ID de la escuela que publica
    nombreCurso: str
    profesor: str
    tipo: str
    estudiantes: Numero
    horas: Numero
    beneficio: str
    descripcion: str
    requisitos: str
    fechaInicio: str
    fechaCierre: str
    promedio: Optional[Numero] = None
    cursosPrevios: Optional[Union[str, List[str]]] = None
    semestre: Optional[str] = None

class PublicarOfertaRequest(BaseModel):
    data: OfertaEscuela

class ActualizarOfertaEscuelaRequest(BaseModel):
    id: str                      # ID de la oferta
    data: Dict[str, Any]
