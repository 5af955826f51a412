import logging
from fastapi import APIRouter, Depends
from approyect.core import store as colecciones
from approyect.core.errores import ErrorAlmacen, FalloAutenticacion
from approyect.core.store import DocumentStore, get_store
from approyect.schemas import auth as schemas

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Autenticación"])

# Tipo de usuario guardado -> rol que entiende la app
ROLES = {
    "Estudiante": "estudiante",
    "Profesor": "profesor",
    "Administrador": "admin",
    "Escuela": "escuela",
    "Departamento": "escuela",
}


def validar_credenciales(store: DocumentStore, email: str, password: str):
    """Devuelve el usuario cuyo correo (sin distinguir mayúsculas) y contraseña coinciden."""
    correo = email.strip().lower()
    for usuario in store.listar(colecciones.USUARIOS):
        if str(usuario.get("correo") or "").lower() == correo and usuario.get("contrasena") == password:
            return usuario
    return None


@router.post("/login", response_model=schemas.LoginResponse)
def login(creds: schemas.LoginRequest, store: DocumentStore = Depends(get_store)):
    try:
        usuario = validar_credenciales(store, creds.email, creds.password)
    except ErrorAlmacen as exc:
        raise FalloAutenticacion("Error al validar credenciales", status_code=402) from exc

    rol = ROLES.get(usuario.get("tipoUsuario")) if usuario else None
    if rol is None:
        logger.info("Login rechazado para %s", creds.email)
        raise FalloAutenticacion("Credenciales inválidas")

    logger.info("Login de %s (%s)", usuario["id"], rol)
    return {
        "message": "Login exitoso",
        "status": "success",
        "rol": rol,
        "id": usuario["id"],
    }
