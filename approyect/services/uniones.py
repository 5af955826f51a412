"""
Uniones entre colecciones hechas del lado del cliente.
"""
from collections import defaultdict
from dataclasses import dataclass
from typing import Callable, Iterable, Iterator, List, Sequence, Tuple, Union

from approyect.services.referencias import normalizar

# Límite del operador 'in' del almacén
TAMANO_LOTE = 10


class PredicadoCampos:
    """Igualdad normalizada entre un campo de la izquierda y otro de la derecha."""

    def __init__(self, campo_izq: str = "tituloOportunidad", campo_der: str = "tituloPrograma"):
        self.campo_izq = campo_izq
        self.campo_der = campo_der

    def llave_izq(self, documento):
        return normalizar(documento.get(self.campo_izq))

    def llave_der(self, documento):
        return normalizar(documento.get(self.campo_der))

    def __call__(self, izq: dict, der: dict) -> bool:
        llave = self.llave_izq(izq)
        return bool(llave) and llave == self.llave_der(der)


POR_TITULO = PredicadoCampos()


def unir(izquierda: Sequence[dict], derecha: Sequence[dict],
         predicado: Callable[[dict, dict], bool] = POR_TITULO) -> List[Tuple[dict, dict]]:
    if not izquierda or not derecha:
        return []

    if isinstance(predicado, PredicadoCampos):
        por_llave = defaultdict(list)
        for der in derecha:
            llave = predicado.llave_der(der)
            if llave:
                por_llave[llave].append(der)
        return [
            (izq, der)
            for izq in izquierda
            for der in por_llave.get(predicado.llave_izq(izq), [])
        ]

    return [(izq, der) for izq in izquierda for der in derecha if predicado(izq, der)]


def lotes(valores: Sequence, tamano: int = TAMANO_LOTE) -> Iterator[list]:
    if tamano < 1:
        raise ValueError("El tamaño de lote debe ser positivo")
    for inicio in range(0, len(valores), tamano):
        yield list(valores[inicio:inicio + tamano])


def unir_por_lotes(ids: Iterable[str], consulta: Callable[[list], List[dict]],
                   tamano: int = TAMANO_LOTE) -> List[dict]:
    """Ejecuta consulta(lote) por cada grupo de hasta `tamano` IDs y concatena.

    Los IDs repetidos se consultan una sola vez y cada fila aparece una sola vez
    en el resultado. El orden no está garantizado.
    """
    unicos = list(dict.fromkeys(i for i in ids if i))
    vistos = set()
    filas = []
    for lote in lotes(unicos, tamano):
        for fila in consulta(lote):
            if fila["id"] in vistos:
                continue
            vistos.add(fila["id"])
            filas.append(fila)
    return filas


# --- LLAVE DE UNIÓN SOLICITUD -> OFERTA ---
@dataclass(frozen=True)
class PorTitulo:
    titulo: str


@dataclass(frozen=True)
class PorOfertaId:
    oferta_id: str


ClaveOferta = Union[PorTitulo, PorOfertaId]


def clave_oferta(solicitud: dict) -> ClaveOferta:
    if solicitud.get("asistenciaId"):
        return PorOfertaId(solicitud["asistenciaId"])
    return PorTitulo(solicitud.get("tituloOportunidad") or "")


def buscar_ofertas(clave: ClaveOferta, ofertas: Sequence[dict]) -> List[dict]:
    if isinstance(clave, PorOfertaId):
        return [o for o in ofertas if o["id"] == clave.oferta_id]
    buscado = normalizar(clave.titulo)
    if not buscado:
        return []
    return [o for o in ofertas if normalizar(o.get("tituloPrograma")) == buscado]
