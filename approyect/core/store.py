"""
Cliente del almacén de documentos.

Todas las colecciones (Usuarios, Asistencias, Solicitudes, AsistenciasAsignadas, Cursos)
se leen y escriben a través de la misma interfaz. Un documento se entrega siempre como
un dict con su ID en la llave "id" y el resto de sus campos.
"""
import copy
import logging
import secrets
import string
from contextlib import contextmanager
from typing import Any, Dict, List, Optional, Tuple

from fastapi import Depends
from google.api_core import exceptions as google_exceptions
from google.cloud import firestore
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from approyect.core import database
from approyect.core.config import settings
from approyect.core.errores import ErrorAlmacen, NoEncontrado
from approyect.core.firebase import get_firestore
from approyect.models.documentos import Documento

logger = logging.getLogger(__name__)

# --- COLECCIONES ---
USUARIOS = "Usuarios"
ASISTENCIAS = "Asistencias"
SOLICITUDES = "Solicitudes"
ASIGNADAS = "AsistenciasAsignadas"
CURSOS = "Cursos"

OPERADORES = ("==", "in")

Filtro = Tuple[str, str, Any]

_ALFABETO_ID = string.ascii_letters + string.digits


def nuevo_id() -> str:
    return "".join(secrets.choice(_ALFABETO_ID) for _ in range(20))


def validar_filtros(filtros, limite_in: int):
    for campo, op, valor in filtros:
        if op not in OPERADORES:
            raise ValueError(f"Operador no soportado: {op}")
        if op == "in":
            if not valor:
                raise ValueError(f"La consulta 'in' sobre '{campo}' necesita al menos un valor")
            if len(valor) > limite_in:
                raise ValueError(
                    f"La consulta 'in' sobre '{campo}' admite como máximo {limite_in} valores"
                )


def coincide(documento: dict, filtros) -> bool:
    for campo, op, valor in filtros:
        actual = documento.get(campo)
        if op == "==" and actual != valor:
            return False
        if op == "in" and actual not in valor:
            return False
    return True


class DocumentStore:
    limite_in = 10

    def obtener(self, coleccion: str, doc_id: str) -> Optional[dict]:
        raise NotImplementedError

    def listar(self, coleccion: str) -> List[dict]:
        raise NotImplementedError

    def consultar(self, coleccion: str, *filtros: Filtro) -> List[dict]:
        raise NotImplementedError

    def agregar(self, coleccion: str, datos: dict) -> str:
        raise NotImplementedError

    def actualizar(self, coleccion: str, doc_id: str, cambios: dict) -> None:
        raise NotImplementedError

    def eliminar(self, coleccion: str, doc_id: str) -> None:
        raise NotImplementedError


# ==============================================================================
#                        ALMACÉN SQL (SQLAlchemy)
# ==============================================================================
class SqlDocumentStore(DocumentStore):
    """Documentos sin esquema guardados en la tabla Documentos.

    Los filtros se evalúan en memoria sobre la colección; las reglas del operador
    'in' son las mismas que impone Firestore.
    """

    def __init__(self, db: Session, limite_in: int = None):
        self.db = db
        self.limite_in = limite_in or settings.LIMITE_CONSULTA_IN

    @contextmanager
    def _traducir_errores(self, escritura: bool = False):
        try:
            yield
        except SQLAlchemyError as e:
            if escritura:
                self.db.rollback()
            raise ErrorAlmacen() from e

    @staticmethod
    def _a_dict(fila: Documento) -> dict:
        return {**copy.deepcopy(fila.datos or {}), "id": fila.id}

    def _fila(self, coleccion, doc_id):
        return self.db.query(Documento).filter(
            Documento.coleccion == coleccion,
            Documento.id == doc_id
        ).first()

    def obtener(self, coleccion, doc_id):
        if not doc_id:
            return None
        with self._traducir_errores():
            fila = self._fila(coleccion, str(doc_id))
            return self._a_dict(fila) if fila else None

    def listar(self, coleccion):
        with self._traducir_errores():
            filas = self.db.query(Documento).filter(Documento.coleccion == coleccion).all()
            return [self._a_dict(f) for f in filas]

    def consultar(self, coleccion, *filtros):
        validar_filtros(filtros, self.limite_in)
        return [d for d in self.listar(coleccion) if coincide(d, filtros)]

    def agregar(self, coleccion, datos):
        doc_id = nuevo_id()
        with self._traducir_errores(escritura=True):
            self.db.add(Documento(coleccion=coleccion, id=doc_id, datos=dict(datos)))
            self.db.commit()
        return doc_id

    def actualizar(self, coleccion, doc_id, cambios):
        with self._traducir_errores(escritura=True):
            fila = self._fila(coleccion, str(doc_id))
            if not fila:
                raise NoEncontrado(f"No existe el documento {doc_id} en {coleccion}")
            # Se asigna un dict nuevo para que SQLAlchemy detecte el cambio en la columna JSON
            fila.datos = {**(fila.datos or {}), **cambios}
            self.db.commit()

    def eliminar(self, coleccion, doc_id):
        with self._traducir_errores(escritura=True):
            fila = self._fila(coleccion, str(doc_id))
            if fila:
                self.db.delete(fila)
                self.db.commit()


# ==============================================================================
#                        ALMACÉN FIRESTORE
# ==============================================================================
class FirestoreDocumentStore(DocumentStore):

    def __init__(self, cliente: firestore.Client, limite_in: int = None):
        self.cliente = cliente
        self.limite_in = limite_in or settings.LIMITE_CONSULTA_IN

    @contextmanager
    def _traducir_errores(self):
        try:
            yield
        except google_exceptions.GoogleAPIError as e:
            raise ErrorAlmacen() from e

    @staticmethod
    def _a_dict(snap) -> dict:
        return {**(snap.to_dict() or {}), "id": snap.id}

    def obtener(self, coleccion, doc_id):
        if not doc_id:
            return None
        with self._traducir_errores():
            snap = self.cliente.collection(coleccion).document(str(doc_id)).get()
            return self._a_dict(snap) if snap.exists else None

    def listar(self, coleccion):
        with self._traducir_errores():
            return [self._a_dict(s) for s in self.cliente.collection(coleccion).stream()]

    def consultar(self, coleccion, *filtros):
        validar_filtros(filtros, self.limite_in)
        with self._traducir_errores():
            query = self.cliente.collection(coleccion)
            for campo, op, valor in filtros:
                query = query.where(filter=firestore.FieldFilter(campo, op, valor))
            return [self._a_dict(s) for s in query.stream()]

    def agregar(self, coleccion, datos):
        with self._traducir_errores():
            _, ref = self.cliente.collection(coleccion).add(dict(datos))
            return ref.id

    def actualizar(self, coleccion, doc_id, cambios):
        try:
            self.cliente.collection(coleccion).document(str(doc_id)).update(cambios)
        except google_exceptions.NotFound as e:
            raise NoEncontrado(f"No existe el documento {doc_id} en {coleccion}") from e
        except google_exceptions.GoogleAPIError as e:
            raise ErrorAlmacen() from e

    def eliminar(self, coleccion, doc_id):
        with self._traducir_errores():
            self.cliente.collection(coleccion).document(str(doc_id)).delete()


# ==============================================================================
#                        CACHÉ DE LECTURAS POR PETICIÓN
# ==============================================================================
class CacheLecturas(DocumentStore):
    """Memoriza las lecturas durante una sola petición.

    Una colección leída completa responde también a obtener() y consultar().
    Cualquier escritura sobre una colección descarta lo memorizado de esa colección.
    """

    def __init__(self, origen: DocumentStore):
        self.origen = origen
        self.limite_in = origen.limite_in
        self._colecciones: Dict[str, List[dict]] = {}
        self._documentos: Dict[Tuple[str, str], Optional[dict]] = {}

    def _invalidar(self, coleccion):
        self._colecciones.pop(coleccion, None)
        for llave in [k for k in self._documentos if k[0] == coleccion]:
            del self._documentos[llave]

    def obtener(self, coleccion, doc_id):
        if not doc_id:
            return None
        if coleccion in self._colecciones:
            encontrado = next((d for d in self._colecciones[coleccion] if d["id"] == str(doc_id)), None)
            return copy.deepcopy(encontrado)
        llave = (coleccion, str(doc_id))
        if llave not in self._documentos:
            self._documentos[llave] = self.origen.obtener(coleccion, doc_id)
        return copy.deepcopy(self._documentos[llave])

    def listar(self, coleccion):
        if coleccion not in self._colecciones:
            self._colecciones[coleccion] = self.origen.listar(coleccion)
            logger.debug("Colección %s leída completa (%d documentos)", coleccion, len(self._colecciones[coleccion]))
        return copy.deepcopy(self._colecciones[coleccion])

    def consultar(self, coleccion, *filtros):
        validar_filtros(filtros, self.limite_in)
        if coleccion in self._colecciones:
            return [copy.deepcopy(d) for d in self._colecciones[coleccion] if coincide(d, filtros)]
        return self.origen.consultar(coleccion, *filtros)

    def agregar(self, coleccion, datos):
        self._invalidar(coleccion)
        return self.origen.agregar(coleccion, datos)

    def actualizar(self, coleccion, doc_id, cambios):
        self._invalidar(coleccion)
        self.origen.actualizar(coleccion, doc_id, cambios)

    def eliminar(self, coleccion, doc_id):
        self._invalidar(coleccion)
        self.origen.eliminar(coleccion, doc_id)


# ==============================================================================
#                        DEPENDENCIA FASTAPI
# ==============================================================================
def get_store(db: Session = Depends(database.get_db)) -> DocumentStore:
    """Un almacén con caché de lecturas por petición."""
    if settings.STORE_BACKEND == "firestore":
        return CacheLecturas(FirestoreDocumentStore(get_firestore()))
    return CacheLecturas(SqlDocumentStore(db))
