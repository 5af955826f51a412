import logging
from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse
from typing import Optional

from approyect.core import store as colecciones
from approyect.core.errores import NoEncontrado, ValidacionFallida
from approyect.core.store import DocumentStore, get_store
from approyect.schemas import ofertas as schemas_ofertas, usuarios as schemas
from approyect.services import reportes, transiciones, vistas
from approyect.services.referencias import normalizar

logger = logging.getLogger(__name__)

# Campos que no se editan por nombre libre
CAMPOS_PROTEGIDOS_USUARIO = ("id",)
CAMPOS_PROTEGIDOS_OFERTA = ("id", "historialCambios")

router = APIRouter(prefix="/admin", tags=["Administración"])

# ==============================================================================
#                                HELPERS
# ==============================================================================

def _validar_campo(campo: str, protegidos):
    if not campo or campo.strip() in protegidos:
        raise ValidacionFallida(f"El campo '{campo}' no se puede modificar")

def _buscar_por_campo(store: DocumentStore, coleccion: str, campo: str, valor: str) -> dict:
    """Primer documento cuyo campo coincide con el valor dado (sin distinguir espacios ni mayúsculas)."""
    buscado = normalizar(valor)
    for documento in store.listar(coleccion):
        if buscado and normalizar(documento.get(campo)) == buscado:
            return documento
    return None

def _monitoreo_filtrado(store: DocumentStore, estado: Optional[str]):
    asistencias = vistas.monitoreo_asistencias(store)
    if estado:
        buscado = transiciones.canonico(estado)
        asistencias = [
            a for a in asistencias
            if transiciones.canonico(a.get("estado"), transiciones.REVISION) == buscado
        ]
    return asistencias

# ==============================================================================
#                        1. GESTIÓN DE USUARIOS
# ==============================================================================
@router.get("/obtenerDatosUsuarios", response_model=schemas.UsuariosResponse)
def obtener_usuarios(store: DocumentStore = Depends(get_store)):
    return {"datos": vistas.listar_usuarios(store)}

@router.put("/ActualizarRol")
def actualizar_rol(dto: schemas.ActualizarRolRequest, store: DocumentStore = Depends(get_store)):
    store.actualizar(colecciones.USUARIOS, dto.idUsuario, {"tipoUsuario": dto.nuevoRol})
    logger.info("Rol de %s actualizado a %s", dto.idUsuario, dto.nuevoRol)
    return {"message": "Rol actualizado correctamente"}

@router.put("/ActualizarUsuario")
def actualizar_usuario(dto: schemas.ActualizarUsuarioRequest, store: DocumentStore = Depends(get_store)):
    _validar_campo(dto.campoSeleccionado, CAMPOS_PROTEGIDOS_USUARIO)
    usuario = _buscar_por_campo(store, colecciones.USUARIOS, "nombre", dto.nombreUsuario)
    if not usuario:
        raise NoEncontrado("Usuario no encontrado")

    store.actualizar(colecciones.USUARIOS, usuario["id"], {dto.campoSeleccionado: dto.nuevoValor})
    return {"message": "Documento actualizado correctamente"}

@router.delete("/EliminarUsuario")
def eliminar_usuario(id: str, store: DocumentStore = Depends(get_store)):
    store.eliminar(colecciones.USUARIOS, id)
    logger.info("Usuario %s eliminado", id)
    return {"message": "Usuario eliminado correctamente"}

@router.get("/carreras")
def obtener_carreras(store: DocumentStore = Depends(get_store)):
    return {"carreras": vistas.listar_carreras_admin(store)}

# ==============================================================================
#                        2. VALIDACIÓN DE OFERTAS
# ==============================================================================
@router.get("/Ofertas")
def obtener_ofertas(store: DocumentStore = Depends(get_store)):
    return {"ofertas": vistas.listar_ofertas_admin(store)}

@router.put("/aceptarOferta")
def aceptar_oferta(dto: schemas_ofertas.AceptarOfertaRequest, store: DocumentStore = Depends(get_store)):
    transiciones.cambiar_estado_oferta(store, dto.id, transiciones.ABIERTO)
    return {"message": "asistencia aceptada correctamente"}

@router.delete("/eliminarOferta")
def eliminar_oferta(id: str, store: DocumentStore = Depends(get_store)):
    # No se borra: la asistencia pasa a Cerrado
    transiciones.cambiar_estado_oferta(store, id, transiciones.CERRADO)
    return {"message": "asistencia cerrada correctamente"}

@router.put("/actualizarOferta")
def actualizar_oferta(dto: schemas_ofertas.ActualizarOfertaRequest, store: DocumentStore = Depends(get_store)):
    _validar_campo(dto.campoSeleccionado, CAMPOS_PROTEGIDOS_OFERTA)
    oferta = _buscar_por_campo(store, colecciones.ASISTENCIAS, "tituloPrograma", dto.nombreUsuario)
    if not oferta:
        raise NoEncontrado("Asistencia no encontrada")

    if dto.campoSeleccionado == "estado":
        transiciones.cambiar_estado_oferta(store, oferta["id"], dto.nuevoValor)
    else:
        store.actualizar(colecciones.ASISTENCIAS, oferta["id"], {dto.campoSeleccionado: dto.nuevoValor})
    return {"message": "Documento actualizado correctamente"}

# ==============================================================================
#                        3. MONITOREO Y EXPORTACIÓN
# ==============================================================================
@router.get("/monitoreoAsistencia")
def monitoreo_asistencia(store: DocumentStore = Depends(get_store)):
    return {"asistencias": vistas.monitoreo_asistencias(store)}

@router.get("/monitoreoAsistencia/export/csv")
def export_csv(estado: Optional[str] = None, store: DocumentStore = Depends(get_store)):
    asistencias = _monitoreo_filtrado(store, estado)
    response = StreamingResponse(reportes.iter_csv(asistencias), media_type="text/csv")
    response.headers["Content-Disposition"] = f"attachment; filename=monitoreo_{estado or 'full'}.csv"
    return response

@router.get("/monitoreoAsistencia/export/pdf")
def export_pdf(estado: Optional[str] = None, store: DocumentStore = Depends(get_store)):
    buffer = reportes.generar_pdf(_monitoreo_filtrado(store, estado))
    return StreamingResponse(buffer, media_type="application/pdf",
                             headers={"Content-Disposition": "attachment; filename=monitoreo.pdf"})
