"""
Resolución de referencias entre documentos.

Los documentos guardan referencias "blandas": IDs (carrera, personaACargo, departamento,
userId) que el almacén no valida. Toda referencia se resuelve contra una foto ya
leída de la colección destino y devuelve Encontrado o Faltante; un faltante nunca
interrumpe el listado del resto de documentos.
"""
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Union

# Valores que se muestran cuando una referencia no se puede resolver
CARRERA_NO_ENCONTRADA = "Carrera no encontrada"
ESCUELA_DESCONOCIDA = "Desconocido"
SIN_ENCARGADO = "Sin encargado"
NO_ASIGNADO = "No asignado"
SIN_TIPO = "Sin tipo"
SIN_PERIODO = "Sin periodo"

TIPOS_CON_CARRERA = ("Estudiante", "Profesor")


@dataclass(frozen=True)
class Encontrado:
    valor: Any


@dataclass(frozen=True)
class Faltante:
    referencia: Any = None


Resolucion = Union[Encontrado, Faltante]


def normalizar(texto) -> str:
    """Llave de comparación: sin espacios sobrantes y en minúsculas."""
    if texto is None:
        return ""
    return " ".join(str(texto).split()).lower()


def indexar(documentos: Iterable[dict]) -> Dict[str, dict]:
    return {d["id"]: d for d in documentos}


def resolver(documento: dict, campo: str, indice: Dict[str, dict], atributo: str) -> Resolucion:
    referencia = documento.get(campo)
    if not referencia or not isinstance(referencia, str):
        return Faltante(referencia)

    destino = indice.get(referencia)
    if destino is None:
        return Faltante(referencia)

    valor = destino.get(atributo)
    if valor is None or valor == "":
        return Faltante(referencia)
    return Encontrado(valor)


def valor_o(resolucion: Resolucion, por_defecto):
    if isinstance(resolucion, Encontrado):
        return resolucion.valor
    return por_defecto


def resolver_carrera(usuario: dict, indice: Dict[str, dict]) -> str:
    tipo = usuario.get("tipoUsuario")
    if tipo == "Escuela":
        # Para las escuelas el campo ya es el nombre de la carrera
        return usuario.get("carrera") or CARRERA_NO_ENCONTRADA
    if tipo in TIPOS_CON_CARRERA:
        return valor_o(resolver(usuario, "carrera", indice, "carrera"), CARRERA_NO_ENCONTRADA)
    return CARRERA_NO_ENCONTRADA


def sin_contrasena(usuario: dict) -> dict:
    return {k: v for k, v in usuario.items() if k != "contrasena"}
