"""
Vistas agregadas que consume la app móvil.

Cada vista lee una sola vez las colecciones que necesita y resuelve las referencias
en memoria. Una referencia rota se muestra con un valor por defecto; un error del
almacén interrumpe la vista completa.
"""
import logging
from typing import Dict, List

from approyect.core import store as colecciones
from approyect.core.errores import NoEncontrado
from approyect.core.store import DocumentStore
from approyect.services import referencias as ref
from approyect.services.formato import a_entero, formatear_horas
from approyect.services.transiciones import es_cerrada
from approyect.services.uniones import (
    PorTitulo, buscar_ofertas, clave_oferta, unir, unir_por_lotes
)

logger = logging.getLogger(__name__)


def _datos(documento: dict) -> dict:
    return {k: v for k, v in documento.items() if k != "id"}


def _oferta_de(solicitud: dict, ofertas: List[dict]):
    """Primero por el ID guardado al registrar; si no, por el título."""
    encontradas = buscar_ofertas(clave_oferta(solicitud), ofertas)
    if not encontradas and solicitud.get("asistenciaId"):
        encontradas = buscar_ofertas(PorTitulo(solicitud.get("tituloOportunidad") or ""), ofertas)
    # Con títulos repetidos gana la última
    return encontradas[-1] if encontradas else None


# ==============================================================================
#                        ESTUDIANTES
# ==============================================================================
def listar_oportunidades(store: DocumentStore) -> List[dict]:
    ofertas = store.listar(colecciones.ASISTENCIAS)
    usuarios = ref.indexar(store.listar(colecciones.USUARIOS))

    oportunidades = []
    for o in ofertas:
        if es_cerrada(o):
            continue
        requisitos = o.get("requisitos")
        oportunidades.append({
            "id": o["id"],
            "titulo": o.get("tituloPrograma") or "Sin título",
            "escuela": ref.valor_o(ref.resolver(o, "departamento", usuarios, "nombre"), ref.ESCUELA_DESCONOCIDA),
            "encargado": ref.valor_o(ref.resolver(o, "personaACargo", usuarios, "nombre"), ref.SIN_ENCARGADO),
            "horas": formatear_horas(o.get("totalHoras")),
            "requisitos": ", ".join(str(r) for r in requisitos) if isinstance(requisitos, list) else "Sin requisitos",
            "descripcion": o.get("descripcion") or "",
            "tipo": o.get("tipo") or "",
            "estado": o.get("estado") or "",
            "horario": o.get("horario") or "Sin horario definido",
            "cantidadVacantes": o.get("cantidadVacantes") or "0",
            "cantidadSolicitudes": o.get("cantidadSolicitudes") or "0",
            "objetivos": o.get("objetivos") or "No especificados",
            "beneficio": o.get("beneficio") or "No aplica",
            "promedioRequerido": o.get("promedioRequerido") or "No especificado",
            "semestre": o.get("semestre") or "No definido",
            "fechaInicio": o.get("fechaInicio") or "No definida",
            "fechaFin": o.get("fechaFin") or "No definida",
            "totalHoras": o.get("totalHoras") or "0",
        })
    return oportunidades


def seguimiento_solicitudes(store: DocumentStore, user_id: str) -> List[dict]:
    solicitudes = store.consultar(colecciones.SOLICITUDES, ("userId", "==", user_id))
    ofertas = store.listar(colecciones.ASISTENCIAS)
    usuarios = ref.indexar(store.listar(colecciones.USUARIOS))

    resultado = []
    for s in solicitudes:
        if not s.get("tituloOportunidad"):
            continue

        tipo_beca, periodo, responsable = ref.SIN_TIPO, ref.SIN_PERIODO, ref.NO_ASIGNADO
        oferta = _oferta_de(s, ofertas)
        if oferta:
            tipo_beca = oferta.get("tipo") or ref.SIN_TIPO
            periodo = oferta.get("semestre") or ref.SIN_PERIODO
            responsable = ref.valor_o(ref.resolver(oferta, "personaACargo", usuarios, "nombre"), ref.NO_ASIGNADO)
        else:
            logger.warning("Solicitud %s sin asistencia para el título '%s'", s["id"], s.get("tituloOportunidad"))

        resultado.append({
            "id": s["id"],
            "titulo": s.get("tituloOportunidad") or "Sin título",
            "tipoBeca": tipo_beca,
            "periodo": periodo,
            "responsable": responsable,
            "estado": s.get("estado") or "Pendiente",
            "horasTrabajadas": a_entero(s.get("horas")),
            "avances": False,
            "retroalimentacion": False,
            "certificados": False,
        })
    return resultado


def informacion_estudiante(store: DocumentStore, user_id: str) -> dict:
    usuarios = ref.indexar(store.listar(colecciones.USUARIOS))
    usuario = usuarios.get(user_id)
    if not usuario:
        raise NoEncontrado("Usuario no encontrado")

    cursos_nombres = []
    if isinstance(usuario.get("cursosAprovados"), list):
        cursos = ref.indexar(store.listar(colecciones.CURSOS))
        for id_curso in usuario["cursosAprovados"]:
            cursos_nombres.append(ref.valor_o(ref.resolver({"curso": id_curso}, "curso", cursos, "nombre"), id_curso))

    datos = ref.sin_contrasena(_datos(usuario))
    datos["carrera"] = ref.resolver_carrera(usuario, usuarios)
    datos["cursosAprovados"] = cursos_nombres
    return datos


def listar_carreras(store: DocumentStore) -> List[str]:
    carreras = []
    for u in store.listar(colecciones.USUARIOS):
        if u.get("tipoUsuario") == "Escuela" and u.get("carrera"):
            nombre = str(u["carrera"]).strip()
            if nombre not in carreras:
                carreras.append(nombre)
    return carreras


# ==============================================================================
#                        ADMINISTRACIÓN
# ==============================================================================
def listar_usuarios(store: DocumentStore) -> List[dict]:
    usuarios = store.listar(colecciones.USUARIOS)
    indice = ref.indexar(usuarios)
    return [
        {
            "id": u["id"],
            "nombre": u.get("nombre"),
            "rol": u.get("tipoUsuario"),
            "correo": u.get("correo"),
            "carrera": ref.resolver_carrera(u, indice),
            "telefono": u.get("telefono"),
            "sede": u.get("sede"),
        }
        for u in usuarios
    ]


def listar_carreras_admin(store: DocumentStore) -> List[dict]:
    return [
        {"id": u["id"], "carrera": u["carrera"]}
        for u in store.listar(colecciones.USUARIOS)
        if u.get("tipoUsuario") == "Escuela" and u.get("carrera")
    ]


def listar_ofertas_admin(store: DocumentStore) -> List[dict]:
    return [
        {
            "id": o["id"],
            "nombre": o.get("tituloPrograma"),
            "tipo": o.get("tipo"),
            "estado": o.get("estado"),
            "estudiantes": o.get("cantidadVacantes"),
            "horas": o.get("totalHoras"),
        }
        for o in store.listar(colecciones.ASISTENCIAS)
    ]


def monitoreo_asistencias(store: DocumentStore) -> List[dict]:
    ofertas = store.listar(colecciones.ASISTENCIAS)
    usuarios = ref.indexar(store.listar(colecciones.USUARIOS))
    return [
        {
            "id": o["id"],
            "asistencia": o.get("tituloPrograma"),
            "periodo": o.get("semestre"),
            "responsable": ref.valor_o(ref.resolver(o, "personaACargo", usuarios, "nombre"), ref.SIN_ENCARGADO),
            "estado": o.get("estado"),
        }
        for o in ofertas
    ]


# ==============================================================================
#                        PROFESORES
# ==============================================================================
def panel_profesor(store: DocumentStore, profesor_id: str) -> Dict[str, list]:
    ofertas = store.consultar(colecciones.ASISTENCIAS, ("personaACargo", "==", profesor_id))
    if not ofertas:
        raise NoEncontrado("No se encontraron asistencias para este profesor.")
    por_id = ref.indexar(ofertas)

    asignaciones = unir_por_lotes(
        por_id.keys(),
        lambda lote: store.consultar(colecciones.ASIGNADAS, ("asistenciaId", "in", lote)),
        tamano=store.limite_in,
    )

    asignadas = []
    for a in asignaciones:
        oferta = por_id.get(a.get("asistenciaId"))
        if oferta is None:
            continue
        asignadas.append({
            "asignacionId": a["id"],
            "datosAsignacion": _datos(a),
            "datosAsistencia": _datos(oferta),
        })

    titulos_asignados = {ref.normalizar(a["datosAsistencia"].get("tituloPrograma")) for a in asignadas}
    cerradas = [
        {"asistenciaId": o["id"], "datosAsistencia": _datos(o)}
        for o in ofertas
        if es_cerrada(o) and ref.normalizar(o.get("tituloPrograma")) not in titulos_asignados
    ]
    return {"asignadas": asignadas, "cerradas": cerradas}


def solicitudes_relacionadas(store: DocumentStore) -> List[dict]:
    ofertas = [o for o in store.listar(colecciones.ASISTENCIAS) if ref.normalizar(o.get("tituloPrograma"))]
    if not ofertas:
        raise NoEncontrado("No hay títulos de programa registrados en la colección Asistencias.")

    solicitudes = store.listar(colecciones.SOLICITUDES)
    relacionadas = []
    vistas = set()
    for solicitud, _ in unir(solicitudes, ofertas):
        if solicitud["id"] not in vistas:
            vistas.add(solicitud["id"])
            relacionadas.append(solicitud)

    if not relacionadas:
        raise NoEncontrado("No se encontraron solicitudes relacionadas con los títulos de las asistencias.")
    return relacionadas


def carrera_de_usuario(store: DocumentStore, user_id: str) -> dict:
    usuario = store.obtener(colecciones.USUARIOS, user_id)
    if not usuario:
        raise NoEncontrado("No such document!")
    if not usuario.get("carrera"):
        raise NoEncontrado("No se encontró la carrera asociada al usuario.")

    carrera = store.obtener(colecciones.USUARIOS, usuario["carrera"])
    if not carrera:
        raise NoEncontrado("No se encontró la carrera.")

    datos = ref.sin_contrasena(usuario)
    datos["carrera"] = carrera.get("carrera")
    return datos


# ==============================================================================
#                        ESCUELAS
# ==============================================================================
def ofertas_escuela(store: DocumentStore, escuela_id: str, solo_activas: bool = False) -> List[dict]:
    ofertas = store.consultar(colecciones.ASISTENCIAS, ("departamento", "==", escuela_id))
    return [
        {
            "id": o["id"],
            "nombre": o.get("tituloPrograma"),
            "tipo": o.get("tipo"),
            "estado": o.get("estado"),
            "estudiantes": o.get("cantidadVacantes"),
            "horas": o.get("totalHoras"),
            "fechaLimite": o.get("fechaFin"),
            "beneficio": o.get("beneficio"),
            "solicitudes": a_entero(o.get("cantidadSolicitudes")),
        }
        for o in ofertas
        if not (solo_activas and es_cerrada(o))
    ]


def profesores_escuela(store: DocumentStore, escuela_id: str) -> List[dict]:
    return [
        {"id": u["id"], "titulo": u.get("nombre")}
        for u in store.consultar(colecciones.USUARIOS, ("carrera", "==", escuela_id))
        if u.get("tipoUsuario") == "Profesor"
    ]


def postulantes_escuela(store: DocumentStore, escuela_id: str) -> List[dict]:
    ofertas = store.consultar(colecciones.ASISTENCIAS, ("departamento", "==", escuela_id))
    usuarios = ref.indexar(store.listar(colecciones.USUARIOS))
    solicitudes = store.listar(colecciones.SOLICITUDES)

    postulantes = []
    for solicitud in solicitudes:
        if _oferta_de(solicitud, ofertas) is None:
            continue
        estudiante = usuarios.get(solicitud.get("userId"), {})
        cursos = estudiante.get("cursosAprovados")
        postulantes.append({
            "id": solicitud.get("userId"),
            "solicitudId": solicitud["id"],
            "nombre": estudiante.get("nombre") or solicitud.get("nombre"),
            "carrera": ref.resolver_carrera(estudiante, usuarios) if estudiante else ref.CARRERA_NO_ENCONTRADA,
            "nivel": estudiante.get("nivelAcademico") or "",
            "ponderado": estudiante.get("ponderado") or solicitud.get("promedio") or "",
            "cursosAprobados": len(cursos) if isinstance(cursos, list) else 0,
            "titulo": solicitud.get("tituloOportunidad"),
            "estado": solicitud.get("estado") or "Pendiente",
        })
    return postulantes


def informacion_oferta(store: DocumentStore, oferta_id: str) -> dict:
    oferta = store.obtener(colecciones.ASISTENCIAS, oferta_id)
    if not oferta:
        raise NoEncontrado("Asistencia no encontrada")
    datos = _datos(oferta)
    # Nombres que usa el formulario de edición
    datos["profesor"] = oferta.get("personaACargo")
    datos["horas"] = oferta.get("totalHoras")
    datos["tipoPago"] = oferta.get("beneficio")
    return datos


def cursos_escuela(store: DocumentStore, escuela_id: str) -> Dict[str, list]:
    """Cursos que imparten los profesores de la escuela y programas que publicó."""
    usuarios = ref.indexar(store.listar(colecciones.USUARIOS))
    profesores = [
        u["id"] for u in usuarios.values()
        if u.get("tipoUsuario") == "Profesor" and u.get("carrera") == escuela_id
    ]
    cursos = unir_por_lotes(
        profesores,
        lambda lote: store.consultar(colecciones.CURSOS, ("profesor", "in", lote)),
        tamano=store.limite_in,
    )

    return {
        "cursos": [
            {
                "id": c["id"],
                "nombre": c.get("nombre"),
                "estudiantes": c.get("estudiantes") if isinstance(c.get("estudiantes"), list) else [],
                "profesor": {
                    "id": c.get("profesor"),
                    "nombre": ref.valor_o(ref.resolver(c, "profesor", usuarios, "nombre"), ref.SIN_ENCARGADO),
                },
                "semestre": c.get("semestre") or "",
                "tipo": c.get("tipo") or "Curso",
            }
            for c in cursos
        ],
        "programas": [
            {
                "id": o["id"],
                "nombre": o.get("tituloPrograma"),
                "semestre": o.get("semestre") or "",
                "tipo": o.get("tipo") or ref.SIN_TIPO,
            }
            for o in store.consultar(colecciones.ASISTENCIAS, ("departamento", "==", escuela_id))
        ],
    }


def _asignaciones_escuela(store: DocumentStore, escuela_id: str):
    """Pares (asignación, oferta) de las ofertas publicadas por la escuela."""
    ofertas = ref.indexar(store.consultar(colecciones.ASISTENCIAS, ("departamento", "==", escuela_id)))
    asignaciones = unir_por_lotes(
        ofertas.keys(),
        lambda lote: store.consultar(colecciones.ASIGNADAS, ("asistenciaId", "in", lote)),
        tamano=store.limite_in,
    )
    return [(a, ofertas[a["asistenciaId"]]) for a in asignaciones if a.get("asistenciaId") in ofertas]


def historial_asistencias(store: DocumentStore, escuela_id: str) -> List[dict]:
    usuarios = ref.indexar(store.listar(colecciones.USUARIOS))
    return [
        {
            "id": a["id"],
            "fecha": a.get("fechaAsignacion") or "",
            "estudiante": ref.valor_o(ref.resolver(a, "userId", usuarios, "nombre"), "Desconocido"),
            "tutor": ref.valor_o(ref.resolver(o, "personaACargo", usuarios, "nombre"), ref.SIN_ENCARGADO),
            "curso": o.get("tituloPrograma") or "",
            "semestre": o.get("semestre") or ref.SIN_PERIODO,
            "estado": "Activo" if a.get("activo", True) else "Inactivo",
        }
        for a, o in _asignaciones_escuela(store, escuela_id)
    ]


def beneficiarios_escuela(store: DocumentStore, escuela_id: str, solo_activos: bool = False) -> List[dict]:
    """Estudiantes asignados a ofertas de la escuela con el beneficio que reciben."""
    usuarios = ref.indexar(store.listar(colecciones.USUARIOS))
    beneficiarios = []
    for a, o in _asignaciones_escuela(store, escuela_id):
        activo = a.get("activo", True)
        if solo_activos and not activo:
            continue
        estudiante = usuarios.get(a.get("userId"), {})
        beneficiarios.append({
            "id": a["id"],
            "idEstudiante": a.get("userId"),
            "estudiante": estudiante.get("nombre") or "Desconocido",
            "carrera": ref.resolver_carrera(estudiante, usuarios) if estudiante else ref.CARRERA_NO_ENCONTRADA,
            "nivel": estudiante.get("nivelAcademico") or "",
            "oferta": o.get("tituloPrograma") or "",
            "tipo": o.get("beneficio") or ref.SIN_TIPO,
            "monto": a_entero(a.get("pago")),
            "semestre": o.get("semestre") or ref.SIN_PERIODO,
            "estado": "Aprobada" if activo else "Inactivo",
        })
    return beneficiarios


def perfil_postulante(store: DocumentStore, user_id: str) -> dict:
    usuarios = ref.indexar(store.listar(colecciones.USUARIOS))
    estudiante = usuarios.get(user_id)
    if not estudiante:
        raise NoEncontrado("Estudiante no encontrado")

    asignaciones = store.consultar(colecciones.ASIGNADAS, ("userId", "==", user_id))
    ofertas = ref.indexar(store.listar(colecciones.ASISTENCIAS))

    historial = []
    for a in asignaciones:
        oferta = ofertas.get(a.get("asistenciaId"))
        if oferta is None:
            continue
        historial.append({
            "titulo": oferta.get("tituloPrograma") or "Sin título",
            "fecha": oferta.get("fechaInicio") or a.get("fechaAsignacion") or "",
            "horas": a_entero(oferta.get("totalHoras")),
        })

    cursos = estudiante.get("cursosAprovados")
    return {
        "estudiante": {
            "correo": estudiante.get("correo") or "",
            "nombre": estudiante.get("nombre") or "",
            "carrera": ref.resolver_carrera(estudiante, usuarios),
            "ponderado": estudiante.get("ponderado") or "",
            "cursosAprobados": len(cursos) if isinstance(cursos, list) else 0,
        },
        "historialAsistencia": historial,
    }
