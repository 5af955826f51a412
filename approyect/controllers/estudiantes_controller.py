import logging
from fastapi import APIRouter, Depends
from typing import Optional

from approyect.core import store as colecciones
from approyect.core.errores import NoEncontrado, ValidacionFallida
from approyect.core.store import DocumentStore, get_store
from approyect.schemas import solicitudes as schemas, usuarios as schemas_usuarios
from approyect.services import vistas
from approyect.services.formato import a_entero, marca_tiempo
from approyect.services.transiciones import PENDIENTE
from approyect.services.uniones import PorTitulo, buscar_ofertas

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Estudiantes"])

# 1. Información del estudiante (carrera y cursos resueltos)
@router.get("/estudiantes/infoEstudiantes")
def informacion_estudiante(userId: str, store: DocumentStore = Depends(get_store)):
    return {"datos": vistas.informacion_estudiante(store, userId)}

# 2. Registrar Perfil Académico
@router.post("/estudiantes/registrarPerfil")
def registrar_perfil(dto: schemas_usuarios.PerfilAcademicoRequest, store: DocumentStore = Depends(get_store)):
    if not store.obtener(colecciones.USUARIOS, dto.userId):
        raise NoEncontrado("Estudiante no encontrado")

    store.actualizar(colecciones.USUARIOS, dto.userId, {
        "carrera": dto.carrera or "",
        "nivelAcademico": dto.nivelAcademico or "",
        "ponderado": dto.promedio or "",
    })
    return {"message": "Perfil académico registrado"}

# 3. Carreras disponibles
@router.get("/estudiantes/carreras")
def obtener_carreras(store: DocumentStore = Depends(get_store)):
    return {"carreras": vistas.listar_carreras(store)}

# 4. Oportunidades (asistencias no cerradas)
@router.get("/asistencias/oportunidades")
def obtener_oportunidades(store: DocumentStore = Depends(get_store)):
    return {"oportunidades": vistas.listar_oportunidades(store)}

# 5. Registrar Solicitud
@router.post("/solicitudes/registrar")
def registrar_solicitud(dto: schemas.SolicitudCreate, store: DocumentStore = Depends(get_store)):
    ofertas = buscar_ofertas(PorTitulo(dto.tituloOportunidad), store.listar(colecciones.ASISTENCIAS))

    solicitud = dto.model_dump()
    solicitud.update({"estado": PENDIENTE, "reunion": False, "fecha": marca_tiempo()})
    # Con un único título coincidente la solicitud queda ligada por ID
    if len(ofertas) == 1:
        solicitud["asistenciaId"] = ofertas[0]["id"]
    solicitud_id = store.agregar(colecciones.SOLICITUDES, solicitud)
    logger.info("Solicitud %s registrada por %s para '%s'", solicitud_id, dto.userId, dto.tituloOportunidad)

    if ofertas:
        oferta = ofertas[0]
        postulaciones = list(oferta.get("postulaciones") or [])
        if dto.userId not in postulaciones:
            postulaciones.append(dto.userId)
        store.actualizar(colecciones.ASISTENCIAS, oferta["id"], {
            "postulaciones": postulaciones,
            "cantidadSolicitudes": a_entero(oferta.get("cantidadSolicitudes")) + 1,
        })

    return {"mensaje": "Solicitud registrada correctamente"}

# 6. Seguimiento de Mis Solicitudes
@router.get("/solicitudes/seguimiento")
def seguimiento_solicitudes(userId: Optional[str] = None, store: DocumentStore = Depends(get_store)):
    if not userId:
        raise ValidacionFallida("Falta el ID del usuario")
    return {"solicitudes": vistas.seguimiento_solicitudes(store, userId)}
