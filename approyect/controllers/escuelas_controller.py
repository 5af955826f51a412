import logging
from fastapi import APIRouter, Depends

from approyect.core import store as colecciones
from approyect.core.errores import NoEncontrado
from approyect.core.store import DocumentStore, get_store
from approyect.schemas import ofertas as schemas, usuarios as schemas_usuarios
from approyect.services import transiciones, vistas
from approyect.services.formato import fecha_hoy, formatear_fecha
from approyect.services.referencias import sin_contrasena

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/escuelas", tags=["Escuelas"])

# 1. Perfil de la Escuela
@router.get("/infoEscuela")
def info_escuela(userId: str, store: DocumentStore = Depends(get_store)):
    escuela = store.obtener(colecciones.USUARIOS, userId)
    if not escuela:
        raise NoEncontrado("Escuela no encontrada")
    return {"datos": sin_contrasena({k: v for k, v in escuela.items() if k != "id"})}

# 2. Actualizar Perfil
@router.put("/actualizarInfoEscuela")
def actualizar_info_escuela(dto: schemas_usuarios.EscuelaUpdate, store: DocumentStore = Depends(get_store)):
    cambios = {k: v for k, v in dto.formData.items() if k not in ("id", "contrasena")}
    store.actualizar(colecciones.USUARIOS, dto.userId, cambios)
    return {"message": "Información actualizada correctamente"}

@router.put("/actualizarInfoAdmin")
def actualizar_info_admin(dto: schemas_usuarios.AdminEscuelaUpdate, store: DocumentStore = Depends(get_store)):
    cambios = dto.model_dump(exclude={"userId"}, exclude_none=True)
    if cambios:
        store.actualizar(colecciones.USUARIOS, dto.userId, cambios)
    return {"message": "Información actualizada correctamente"}

# 3. Ofertas publicadas (solo activas o historial completo)
@router.get("/historialOfertasActivas")
def ofertas_activas(userId: str, store: DocumentStore = Depends(get_store)):
    return {"ofertasActuales": vistas.ofertas_escuela(store, userId, solo_activas=True)}

@router.get("/historialOfertas")
def historial_ofertas(userId: str, store: DocumentStore = Depends(get_store)):
    return {"ofertasActuales": vistas.ofertas_escuela(store, userId)}

# 4. Profesores de la Escuela
@router.get("/profesoresEscuela")
def profesores_escuela(userId: str, store: DocumentStore = Depends(get_store)):
    return {"profesor": vistas.profesores_escuela(store, userId)}

# 5. Publicar Oferta
@router.post("/publiOferta")
def publicar_oferta(dto: schemas.PublicarOfertaRequest, store: DocumentStore = Depends(get_store)):
    data = dto.data
    cursos_previos = data.cursosPrevios
    if isinstance(cursos_previos, str):
        cursos_previos = [c.strip() for c in cursos_previos.split(",") if c.strip()]

    oferta_id = store.agregar(colecciones.ASISTENCIAS, {
        "tituloPrograma": data.nombreCurso,
        "personaACargo": data.profesor,
        "departamento": data.id,
        "tipo": data.tipo,
        "cantidadVacantes": str(data.estudiantes),
        "totalHoras": data.horas,
        "beneficio": data.beneficio,
        "promedioRequerido": data.promedio,
        "cursosPrevios": cursos_previos or [],
        "descripcion": data.descripcion,
        "requisitos": [r.strip() for r in data.requisitos.split(",") if r.strip()],
        "fechaInicio": formatear_fecha(data.fechaInicio),
        "fechaFin": formatear_fecha(data.fechaCierre),
        "semestre": data.semestre,
        "estado": transiciones.REVISION,
        "cantidadSolicitudes": 0,
        "postulaciones": [],
        "historialCambios": [{"cambios": "Creación de la oferta", "fecha": fecha_hoy()}],
    })
    logger.info("Escuela %s publicó la oferta %s", data.id, oferta_id)
    return {"message": "Oferta publicada exitosamente", "id": oferta_id}

# 6. Postulantes a las ofertas de la Escuela
@router.get("/historialPostulantes")
def historial_postulantes(userId: str, store: DocumentStore = Depends(get_store)):
    return {"estudiantes": vistas.postulantes_escuela(store, userId)}

@router.get("/perfilEstudiantes")
def perfil_estudiantes(userId: str, store: DocumentStore = Depends(get_store)):
    return vistas.perfil_postulante(store, userId)

# 7. Detalle y edición de una oferta
@router.get("/informacionOferta")
def informacion_oferta(oferta: str, store: DocumentStore = Depends(get_store)):
    return {"ofertaInfo": vistas.informacion_oferta(store, oferta)}

@router.put("/actualizarOferta")
def actualizar_oferta(dto: schemas.ActualizarOfertaEscuelaRequest, store: DocumentStore = Depends(get_store)):
    oferta = store.obtener(colecciones.ASISTENCIAS, dto.id)
    if not oferta:
        raise NoEncontrado("Asistencia no encontrada")

    # 'id' en data es la escuela que edita, no la oferta
    cambios = {k: v for k, v in dto.data.items() if k not in ("id", "historialCambios")}
    estado = cambios.pop("estado", None)
    if estado is not None:
        transiciones.validar_transicion_oferta(oferta.get("estado"), estado)

    for campo in ("fechaInicio", "fechaFin"):
        if campo in cambios:
            cambios[campo] = formatear_fecha(cambios[campo])
    if isinstance(cambios.get("requisitos"), str):
        cambios["requisitos"] = [r.strip() for r in cambios["requisitos"].split(",") if r.strip()]

    if cambios:
        historial = list(oferta.get("historialCambios") or [])
        historial.append({"cambios": "Actualización de la oferta", "fecha": fecha_hoy()})
        cambios["historialCambios"] = historial
        store.actualizar(colecciones.ASISTENCIAS, dto.id, cambios)
    if estado is not None:
        transiciones.cambiar_estado_oferta(store, dto.id, estado)
    logger.info("Oferta %s actualizada por la escuela %s", dto.id, dto.data.get("id"))
    return {"message": "Oferta actualizada exitosamente"}

# 8. Cursos de la Escuela
@router.get("/cursosEscuela")
def cursos_escuela(userId: str, store: DocumentStore = Depends(get_store)):
    return vistas.cursos_escuela(store, userId)

# 9. Asistencias, beneficiarios y pagos
@router.get("/historialAsistencias")
def historial_asistencias(userId: str, store: DocumentStore = Depends(get_store)):
    return {"historialAsistencia": vistas.historial_asistencias(store, userId)}

@router.get("/historialBeneficiarios")
def historial_beneficiarios(userId: str, store: DocumentStore = Depends(get_store)):
    return vistas.beneficiarios_escuela(store, userId)

@router.get("/historialPagoAsisActivos")
def historial_pagos_activos(userId: str, store: DocumentStore = Depends(get_store)):
    return vistas.beneficiarios_escuela(store, userId, solo_activos=True)
