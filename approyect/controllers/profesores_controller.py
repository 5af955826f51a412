import logging
from fastapi import APIRouter, Depends

from approyect.core import store as colecciones
from approyect.core.errores import NoEncontrado, ValidacionFallida
from approyect.core.store import DocumentStore, get_store
from approyect.schemas import ofertas as schemas_ofertas, solicitudes as schemas, usuarios as schemas_usuarios
from approyect.services import transiciones, vistas
from approyect.services.formato import fecha_hoy, formatear_fecha
from approyect.services.referencias import normalizar, sin_contrasena

logger = logging.getLogger(__name__)

# Sin prefijo: la app móvil llama a estas rutas desde la raíz
router = APIRouter(tags=["Profesores"])

# ==============================================================================
#                        1. PERFIL DEL PROFESOR
# ==============================================================================
@router.get("/infoProfesores/{id}")
def info_profesor(id: str, store: DocumentStore = Depends(get_store)):
    profesor = store.obtener(colecciones.USUARIOS, id)
    if not profesor:
        raise NoEncontrado("No such document!")
    return sin_contrasena(profesor)

@router.patch("/updateInfoProfesores/{id}")
def actualizar_profesor(id: str, dto: schemas_usuarios.ProfesorUpdate, store: DocumentStore = Depends(get_store)):
    cambios = dto.model_dump(exclude_unset=True)
    if "password" in cambios:
        cambios["contrasena"] = cambios.pop("password")
    store.actualizar(colecciones.USUARIOS, id, cambios)
    return {"message": "Document successfully updated!"}

@router.get("/getCursos/{id}")
def cursos_profesor(id: str, store: DocumentStore = Depends(get_store)):
    cursos = store.consultar(colecciones.CURSOS, ("profesor", "==", id))
    if not cursos:
        raise NoEncontrado("No courses found for this professor")
    return cursos

@router.get("/getHistorial/{id}")
def historial_profesor(id: str, store: DocumentStore = Depends(get_store)):
    asistencias = store.consultar(colecciones.ASISTENCIAS, ("personaACargo", "==", id))
    if not asistencias:
        raise NoEncontrado("No courses found for this professor")
    return asistencias

@router.get("/getUserInfoByAsistencias/{id}")
def panel_asistencias(id: str, store: DocumentStore = Depends(get_store)):
    return vistas.panel_profesor(store, id)

@router.get("/searchCarreraByuserId/{id}")
def carrera_por_usuario(id: str, store: DocumentStore = Depends(get_store)):
    return vistas.carrera_de_usuario(store, id)

# ==============================================================================
#                        2. GESTIÓN DE OFERTAS
# ==============================================================================
@router.post("/insertNewOferta/{id}")
def crear_oferta(id: str, dto: schemas_ofertas.NuevaOfertaProfesor, store: DocumentStore = Depends(get_store)):
    horas_semana = str(dto.horasSemanal)
    nueva = {
        "beneficio": dto.beneficios,
        "descripcion": dto.descripcion,
        "fechaFin": formatear_fecha(dto.fechaCierre),
        "fechaInicio": formatear_fecha(dto.fechaInicio),
        "horario": dto.horario,
        "horaXSemana": horas_semana,
        "tituloPrograma": dto.nombrePrograma,
        "objetivos": dto.objetivos,
        "requisitos": [r.strip() for r in dto.requisitos.split(",") if r.strip()],
        "tipo": dto.tipo,
        "cantidadVacantes": str(dto.vacantes),
        "semestre": dto.semestre,
        "personaACargo": id,
        # Toda oferta nueva espera la aprobación del administrador
        "estado": transiciones.REVISION,
        "cantidadSolicitudes": 0,
        "departamento": dto.departamento,
        "promedioRequerido": dto.promedioRequerido,
        "totalHoras": dto.totalHoras,
        "requisitosAdicionales": dto.requisitosAdicionales,
        "postulaciones": [],
        "historialCambios": [{
            "cambios": "Creación de la oferta",
            "fecha": fecha_hoy(),
            "horaXSemana": horas_semana,
        }],
    }
    oferta_id = store.agregar(colecciones.ASISTENCIAS, nueva)
    logger.info("Profesor %s creó la oferta %s", id, oferta_id)
    return {"message": "Oferta creada exitosamente", "id": oferta_id}

@router.get("/getAsistenciasByProfesor/{id}")
def asistencias_profesor(id: str, store: DocumentStore = Depends(get_store)):
    asistencias = [
        {"asistenciaId": a["id"], **{k: v for k, v in a.items() if k != "id"}}
        for a in store.consultar(colecciones.ASISTENCIAS, ("personaACargo", "==", id))
    ]
    if not asistencias:
        raise NoEncontrado("No asistencias found for this professor")
    return asistencias

@router.patch("/updateOferta/{id}")
def actualizar_oferta(id: str, dto: schemas_ofertas.OfertaUpdate, store: DocumentStore = Depends(get_store)):
    oferta = store.obtener(colecciones.ASISTENCIAS, id)
    if not oferta:
        raise NoEncontrado("Asistencia no encontrada")

    cambios = dto.model_dump()
    cambios.pop("id", None)
    estado = cambios.pop("estado", None)
    # El estado se valida antes de escribir cualquier otro campo
    if estado is not None:
        transiciones.validar_transicion_oferta(oferta.get("estado"), estado)
    cambios.pop("historialCambios", None)

    if cambios:
        store.actualizar(colecciones.ASISTENCIAS, id, cambios)
    if estado is not None:
        transiciones.cambiar_estado_oferta(store, id, estado)
    return {"message": "Oferta actualizada exitosamente!"}

@router.delete("/deleteOferta/{id}")
def eliminar_oferta(id: str, store: DocumentStore = Depends(get_store)):
    if not store.obtener(colecciones.ASISTENCIAS, id):
        raise NoEncontrado("Asistencia no encontrada")
    store.eliminar(colecciones.ASISTENCIAS, id)
    logger.info("Oferta %s eliminada", id)
    return {"message": "Oferta eliminada exitosamente."}

@router.patch("/closeOferta/{id}")
def cerrar_oferta(id: str, store: DocumentStore = Depends(get_store)):
    transiciones.cambiar_estado_oferta(store, id, transiciones.CERRADO)
    return {"message": "Oferta cerrada exitosamente."}

# ==============================================================================
#                        3. POSTULACIONES
# ==============================================================================
@router.get("/getSolicitudesRelacionadasConAsistencias/{id}")
def solicitudes_relacionadas(id: str, store: DocumentStore = Depends(get_store)):
    return vistas.solicitudes_relacionadas(store)

@router.patch("/updatePostulacionAcciones/{userId}")
def acciones_postulacion(userId: str, dto: schemas.PostulacionAcciones, store: DocumentStore = Depends(get_store)):
    buscado = normalizar(dto.titulo)
    encontradas = [
        s for s in store.consultar(colecciones.SOLICITUDES, ("userId", "==", userId))
        if normalizar(s.get("tituloOportunidad")) == buscado
    ]
    if not encontradas:
        raise NoEncontrado("No se encontró la postulación.")
    solicitud = encontradas[0]

    destino = None
    if dto.estado:
        transiciones.validar_transicion_solicitud(solicitud.get("estado"), dto.estado)
        destino = transiciones.canonico(dto.estado)

    # Aprobar elimina la solicitud; la reunión solo se guarda en los demás casos
    if dto.reunion is not None and destino != transiciones.APROBADO:
        store.actualizar(colecciones.SOLICITUDES, solicitud["id"], {"reunion": dto.reunion})

    if destino == transiciones.APROBADO:
        transiciones.aprobar_solicitud(store, {
            "userId": userId,
            "tituloOportunidad": solicitud.get("tituloOportunidad") or "",
            "asistenciaId": solicitud.get("asistenciaId"),
        })
    elif destino == transiciones.RECHAZADO:
        transiciones.rechazar_solicitud(store, solicitud["id"])

    return {"message": "Postulación actualizada exitosamente."}

@router.patch("/assignAndRemoveSolicitud")
def asignar_estudiante(dto: schemas.AsignacionRequest, store: DocumentStore = Depends(get_store)):
    asignacion_id = transiciones.aprobar_solicitud(store, dto.model_dump(exclude_none=True))
    return {"message": "Estudiante asignado y solicitud eliminada.", "id": asignacion_id}

@router.patch("/setSolicitudReunion/{id}")
def solicitar_reunion(id: str, store: DocumentStore = Depends(get_store)):
    store.actualizar(colecciones.SOLICITUDES, id, {"reunion": True})
    return {"message": "Reunión solicitada en la postulación."}

@router.patch("/rechazarPostulacion/{id}")
def rechazar_postulacion(id: str, store: DocumentStore = Depends(get_store)):
    transiciones.rechazar_solicitud(store, id)
    return {"message": "Postulación rechazada."}

# ==============================================================================
#                        4. SEGUIMIENTO Y DESEMPEÑO
# ==============================================================================
@router.patch("/addDesempeno/{id}")
def agregar_desempeno(id: str, dto: schemas_ofertas.DesempenoRequest, store: DocumentStore = Depends(get_store)):
    store.actualizar(colecciones.ASIGNADAS, id, {
        "desempeno": dto.desempeno,
        "retroalimentacion": dto.retroalimentacion,
    })
    return {"message": "Desempeño y retroalimentación agregados exitosamente."}

@router.patch("/updateAsistenciaFeedback/{type}/{id}")
def guardar_feedback(type: str, id: str, dto: schemas.FeedbackRequest, store: DocumentStore = Depends(get_store)):
    if type == "asignada":
        coleccion = colecciones.ASIGNADAS
    elif type == "cerrada":
        coleccion = colecciones.ASISTENCIAS
    else:
        raise ValidacionFallida("Tipo inválido")

    if not store.obtener(coleccion, id):
        raise NoEncontrado("Documento no encontrado")

    store.actualizar(coleccion, id, {
        "retroalimentacion": dto.retroalimentacion,
        "desempeno": dto.desempeno,
    })
    return {"message": "Feedback guardado correctamente."}

@router.patch("/updateSeguimiento/{id}")
def actualizar_seguimiento(id: str, dto: schemas_ofertas.SeguimientoUpdate, store: DocumentStore = Depends(get_store)):
    store.actualizar(colecciones.ASIGNADAS, id, dto.model_dump(exclude_unset=True))
    return {"message": "Seguimiento actualizado correctamente."}
