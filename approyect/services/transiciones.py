"""
Guardia de transiciones de estado.

Toda escritura del campo `estado` de una Asistencia (oferta) o de una Solicitud pasa
por aquí. Las transiciones no permitidas se rechazan con TransicionInvalida en lugar
de sobrescribir el campo.
"""
import logging
from typing import List

from approyect.core import store as colecciones
from approyect.core.config import settings
from approyect.core.errores import NoEncontrado, TransicionInvalida, ValidacionFallida
from approyect.core.store import DocumentStore
from approyect.services.formato import a_entero, fecha_hoy, marca_tiempo
from approyect.services.referencias import normalizar
from approyect.services.uniones import PorOfertaId, PorTitulo, buscar_ofertas

logger = logging.getLogger(__name__)

# --- OFERTA (Asistencia) ---
REVISION = "Revision"
ABIERTO = "Abierto"
CERRADO = "Cerrado"

TRANSICIONES_OFERTA = {
    REVISION: {ABIERTO, CERRADO},
    ABIERTO: {CERRADO},
    CERRADO: set(),
}

# --- SOLICITUD ---
PENDIENTE = "Pendiente"
APROBADO = "Aprobado"
RECHAZADO = "Rechazado"

TRANSICIONES_SOLICITUD = {
    PENDIENTE: {APROBADO, RECHAZADO},
    APROBADO: set(),
    RECHAZADO: set(),
}

# Escrituras antiguas guardaron variantes como "Abierta"
_ALIAS = {
    "revision": REVISION, "revisión": REVISION,
    "abierto": ABIERTO, "abierta": ABIERTO,
    "cerrado": CERRADO, "cerrada": CERRADO,
    "pendiente": PENDIENTE,
    "aprobado": APROBADO, "aprobada": APROBADO,
    "rechazado": RECHAZADO, "rechazada": RECHAZADO,
}

# --- POLÍTICAS DE APROBACIÓN ---
POLITICA_LIBRE = "libre"
POLITICA_CUPO = "cupo"
POLITICA_CIERRE_AUTOMATICO = "cierre_automatico"
POLITICAS = (POLITICA_LIBRE, POLITICA_CUPO, POLITICA_CIERRE_AUTOMATICO)


def canonico(estado, inicial: str = None):
    if estado is None or str(estado).strip() == "":
        return inicial
    return _ALIAS.get(normalizar(estado), str(estado).strip())


def validar_transicion(maquina: dict, actual, nuevo, inicial: str) -> bool:
    """True si hay que escribir el cambio, False si ya estaba en ese estado."""
    destino = canonico(nuevo)
    if destino not in maquina:
        raise ValidacionFallida(f"Estado desconocido: {nuevo}")

    origen = canonico(actual, inicial)
    if origen == destino:
        return False
    if origen not in maquina or destino not in maquina[origen]:
        raise TransicionInvalida(f"No se puede pasar de '{origen}' a '{destino}'")
    return True


def validar_transicion_oferta(actual, nuevo) -> bool:
    return validar_transicion(TRANSICIONES_OFERTA, actual, nuevo, REVISION)


def validar_transicion_solicitud(actual, nuevo) -> bool:
    return validar_transicion(TRANSICIONES_SOLICITUD, actual, nuevo, PENDIENTE)


def es_abierta(oferta: dict) -> bool:
    return canonico(oferta.get("estado"), REVISION) == ABIERTO


def es_cerrada(oferta: dict) -> bool:
    return canonico(oferta.get("estado"), REVISION) == CERRADO


# ==============================================================================
#                        OFERTAS
# ==============================================================================
def cambiar_estado_oferta(store: DocumentStore, oferta_id: str, nuevo: str) -> bool:
    oferta = store.obtener(colecciones.ASISTENCIAS, oferta_id)
    if not oferta:
        raise NoEncontrado("Asistencia no encontrada")

    if not validar_transicion_oferta(oferta.get("estado"), nuevo):
        return False

    origen = canonico(oferta.get("estado"), REVISION)
    destino = canonico(nuevo)
    historial = list(oferta.get("historialCambios") or [])
    historial.append({
        "cambios": f"Cambio de estado: {origen} -> {destino}",
        "fecha": fecha_hoy(),
    })
    store.actualizar(colecciones.ASISTENCIAS, oferta_id, {
        "estado": destino,
        "historialCambios": historial,
    })
    logger.info("Asistencia %s: %s -> %s", oferta_id, origen, destino)
    return True


# ==============================================================================
#                        SOLICITUDES
# ==============================================================================
def rechazar_solicitud(store: DocumentStore, solicitud_id: str) -> bool:
    solicitud = store.obtener(colecciones.SOLICITUDES, solicitud_id)
    if not solicitud:
        raise NoEncontrado("No se encontró la postulación.")

    if not validar_transicion_solicitud(solicitud.get("estado"), RECHAZADO):
        return False

    store.actualizar(colecciones.SOLICITUDES, solicitud_id, {"estado": RECHAZADO})
    logger.info("Solicitud %s rechazada", solicitud_id)
    return True


def _asignaciones_de(store: DocumentStore, oferta_id: str) -> List[dict]:
    return store.consultar(colecciones.ASIGNADAS, ("asistenciaId", "==", oferta_id))


def aprobar_solicitud(store: DocumentStore, datos: dict, politica: str = None) -> str:
    """Asigna al estudiante a la Asistencia abierta y elimina sus solicitudes.

    La asignación se crea primero; las solicitudes se borran solo después de que la
    asignación quedó guardada. Devuelve el ID de la asignación.
    """
    politica = politica or settings.POLITICA_APROBACION
    if politica not in POLITICAS:
        raise ValidacionFallida(f"Política de aprobación desconocida: {politica}")

    user_id = datos.get("userId")
    titulo = datos.get("tituloOportunidad") or ""
    if not user_id or not (titulo.strip() or datos.get("asistenciaId")):
        raise ValidacionFallida("Faltan userId o tituloOportunidad")

    # 1. Asistencia abierta con ese título (o con ese ID)
    clave = PorOfertaId(datos["asistenciaId"]) if datos.get("asistenciaId") else PorTitulo(titulo)
    candidatas = [o for o in buscar_ofertas(clave, store.listar(colecciones.ASISTENCIAS)) if es_abierta(o)]
    if not candidatas:
        raise NoEncontrado("No existe Asistencia abierta con ese título.")
    oferta = candidatas[0]
    if len(candidatas) > 1:
        logger.warning("Hay %d asistencias abiertas con el título '%s', se usa %s",
                       len(candidatas), titulo, oferta["id"])

    # 2. Las solicitudes del estudiante deben poder pasar a Aprobado
    buscado = normalizar(titulo or oferta.get("tituloPrograma"))
    solicitudes = [
        s for s in store.consultar(colecciones.SOLICITUDES, ("userId", "==", user_id))
        if normalizar(s.get("tituloOportunidad")) == buscado or s.get("asistenciaId") == oferta["id"]
    ]
    for s in solicitudes:
        validar_transicion_solicitud(s.get("estado"), APROBADO)

    # 3. Política de cupos
    vacantes = a_entero(oferta.get("cantidadVacantes"))
    if politica == POLITICA_CUPO and vacantes and len(_asignaciones_de(store, oferta["id"])) >= vacantes:
        raise ValidacionFallida("La asistencia ya no tiene vacantes disponibles.")

    # 4. Crear la asignación
    asignacion_id = store.agregar(colecciones.ASIGNADAS, {
        "asistenciaId": oferta["id"],
        "userId": user_id,
        "pago": datos.get("pago", settings.PAGO_POR_DEFECTO),
        "retroalimentacion": datos.get("retroalimentacion", ""),
        "desempeno": datos.get("desempeno", ""),
        "fechaAsignacion": datos.get("fechaAsignacion") or marca_tiempo(),
        "activo": datos.get("activo", True),
    })
    logger.info("Estudiante %s asignado a la asistencia %s (asignación %s)", user_id, oferta["id"], asignacion_id)

    # 5. Solo ahora se eliminan las solicitudes
    for s in solicitudes:
        store.eliminar(colecciones.SOLICITUDES, s["id"])

    if politica == POLITICA_CIERRE_AUTOMATICO and vacantes \
            and len(_asignaciones_de(store, oferta["id"])) >= vacantes:
        cambiar_estado_oferta(store, oferta["id"], CERRADO)

    return asignacion_id
