from pydantic import BaseModel
from typing import Any, Dict, List, Optional, Union

Numero = Union[int, float, str]


# --- ADMINISTRACIÓN ---
class ActualizarRolRequest(BaseModel):
    idUsuario: str
    nuevoRol: str

class ActualizarUsuarioRequest(BaseModel):
    nombreUsuario: str
    campoSeleccionado: str
    nuevoValor: Any

class UsuarioAdmin(BaseModel):
    id: str
    nombre: Optional[str] = None
    rol: Optional[str] = None
    correo: Optional[str] = None
    carrera: str
    telefono: Optional[Any] = None
    sede: Optional[str] = None

class UsuariosResponse(BaseModel):
    datos: List[UsuarioAdmin]


# --- ESTUDIANTES ---
class PerfilAcademicoRequest(BaseModel):
    userId: str
    carrera: Optional[str] = ""
    nivelAcademico: Optional[str] = ""
    promedio: Optional[Numero] = ""


# --- PROFESORES ---
class ProfesorUpdate(BaseModel):
    nombre: Optional[str] = None
    correo: Optional[str] = None
    telefono: Optional[Any] = None
    sede: Optional[str] = None
    password: Optional[str] = None


# --- ESCUELAS ---
class EscuelaUpdate(BaseModel):
    userId: str
    formData: Dict[str, Any]


class AdminEscuelaUpdate(BaseModel):
    userId: str
    nombre: Optional[str] = None
    facultad: Optional[str] = None
