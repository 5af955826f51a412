import math
import pytest

from approyect.core import store as colecciones
from approyect.services.uniones import (
    PorOfertaId, PorTitulo, PredicadoCampos, buscar_ofertas, clave_oferta, lotes, unir, unir_por_lotes
)
from tests.test_db import sembrar


def _asignaciones(n):
    # Dos asignaciones por oferta y algunas de ofertas ajenas
    filas = []
    for i in range(n):
        filas.append({"id": f"a{i}-1", "asistenciaId": f"o{i}"})
        filas.append({"id": f"a{i}-2", "asistenciaId": f"o{i}"})
    filas.append({"id": "ajena", "asistenciaId": "otra"})
    return filas


@pytest.mark.parametrize("n", [0, 1, 9, 10, 11, 19, 20, 21, 100, 256, 257])
def test_unir_por_lotes_devuelve_todas_las_filas_sin_duplicados(n):
    filas = _asignaciones(n)
    ids = [f"o{i}" for i in range(n)]
    llamadas = []

    def consulta(lote):
        assert 0 < len(lote) <= 10
        llamadas.append(lote)
        return [f for f in filas if f["asistenciaId"] in lote]

    resultado = unir_por_lotes(ids, consulta)

    esperado = {f["id"] for f in filas if f["asistenciaId"] in set(ids)}
    assert {f["id"] for f in resultado} == esperado
    assert len(resultado) == len(esperado)
    assert len(llamadas) == math.ceil(n / 10)


def test_unir_por_lotes_ignora_ids_repetidos_y_vacios():
    llamadas = []

    def consulta(lote):
        llamadas.append(lote)
        return [{"id": f"fila-{i}"} for i in lote]

    resultado = unir_por_lotes(["o1", "o1", None, "", "o2"], consulta)

    assert llamadas == [["o1", "o2"]]
    assert len(resultado) == 2


def test_unir_por_lotes_sobre_el_almacen(session, store):
    ofertas = [f"of{i}" for i in range(23)]
    sembrar(session, colecciones.ASIGNADAS, *[
        {"id": f"as{i}", "asistenciaId": oferta} for i, oferta in enumerate(ofertas)
    ])

    resultado = unir_por_lotes(
        ofertas,
        lambda lote: store.consultar(colecciones.ASIGNADAS, ("asistenciaId", "in", lote)),
        tamano=store.limite_in,
    )

    assert sorted(f["id"] for f in resultado) == sorted(f"as{i}" for i in range(23))


def test_lotes_rechaza_tamano_invalido():
    with pytest.raises(ValueError):
        list(lotes([1, 2], 0))


def test_unir_por_titulo_normalizado():
    solicitudes = [{"id": "s1", "tituloOportunidad": " Tuto  Mate "}, {"id": "s2", "tituloOportunidad": ""}]
    ofertas = [{"id": "o1", "tituloPrograma": "tuto mate"}, {"id": "o2", "tituloPrograma": ""}]

    pares = unir(solicitudes, ofertas)

    assert [(s["id"], o["id"]) for s, o in pares] == [("s1", "o1")]


def test_unir_con_predicado_arbitrario_y_entradas_vacias():
    izq = [{"id": "a", "n": 1}, {"id": "b", "n": 2}]
    der = [{"id": "x", "n": 2}]

    assert unir(izq, der, lambda i, d: i["n"] == d["n"]) == [(izq[1], der[0])]
    assert unir([], der) == []
    assert unir(izq, [], PredicadoCampos("n", "n")) == []


def test_clave_oferta_prefiere_el_id_guardado():
    assert clave_oferta({"asistenciaId": "o1", "tituloOportunidad": "X"}) == PorOfertaId("o1")
    assert clave_oferta({"tituloOportunidad": "X"}) == PorTitulo("X")

    ofertas = [{"id": "o1", "tituloPrograma": "Tuto Mate"}, {"id": "o2", "tituloPrograma": "tuto mate"}]
    assert [o["id"] for o in buscar_ofertas(PorOfertaId("o2"), ofertas)] == ["o2"]
    assert [o["id"] for o in buscar_ofertas(PorTitulo("TUTO MATE "), ofertas)] == ["o1", "o2"]
    assert buscar_ofertas(PorTitulo("  "), ofertas) == []
