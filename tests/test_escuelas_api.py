import pytest

from approyect.core import store as colecciones
from approyect.core.store import SqlDocumentStore
from tests.test_db import sembrar


@pytest.fixture
def datos(session):
    sembrar(session, colecciones.USUARIOS,
            {"id": "u1", "tipoUsuario": "Escuela", "carrera": "Computación", "nombre": "Escuela de Computación",
             "contrasena": "1234", "telefono": "2222-2222"},
            {"id": "p1", "tipoUsuario": "Profesor", "carrera": "u1", "nombre": "Luis"},
            {"id": "e1", "tipoUsuario": "Estudiante", "carrera": "u1", "nombre": "Ana",
             "nivelAcademico": "2", "ponderado": "85", "cursosAprovados": ["c1"]})
    sembrar(session, colecciones.CURSOS,
            {"id": "c1", "nombre": "Cálculo I", "profesor": "p1", "estudiantes": ["e1"], "semestre": "I-2024"},
            {"id": "c2", "nombre": "Ajeno", "profesor": "p9"})
    sembrar(session, colecciones.ASISTENCIAS,
            {"id": "o1", "tituloPrograma": "Tuto Mate", "estado": "Abierto", "departamento": "u1",
             "cantidadSolicitudes": "1", "personaACargo": "p1", "beneficio": "Exoneración", "semestre": "I-2024",
             "totalHoras": "10", "fechaInicio": "05/02/2024", "historialCambios": []},
            {"id": "o2", "tituloPrograma": "Vieja", "estado": "Cerrado", "departamento": "u1", "beneficio": "Pago"},
            {"id": "o3", "tituloPrograma": "Ajena", "estado": "Abierto", "departamento": "u9"})
    sembrar(session, colecciones.SOLICITUDES,
            {"id": "s1", "userId": "e1", "tituloOportunidad": "tuto mate", "estado": "Pendiente"},
            {"id": "s2", "userId": "e1", "tituloOportunidad": "ajena", "estado": "Pendiente"})
    sembrar(session, colecciones.ASIGNADAS,
            {"id": "a1", "asistenciaId": "o1", "userId": "e1", "pago": 50000, "activo": True,
             "fechaAsignacion": "2024-03-01"},
            {"id": "a2", "asistenciaId": "o2", "userId": "e1", "pago": "20000", "activo": False},
            {"id": "a3", "asistenciaId": "o3", "userId": "e1", "pago": 1000})


@pytest.mark.asyncio
async def test_info_y_actualizacion_de_la_escuela(client, session, datos):
    response = await client.get("/escuelas/infoEscuela", params={"userId": "u1"})
    assert response.status_code == 200
    info = response.json()["datos"]
    assert info["nombre"] == "Escuela de Computación"
    assert "contrasena" not in info

    response = await client.put("/escuelas/actualizarInfoEscuela", json={
        "userId": "u1", "formData": {"telefono": "8888-8888", "contrasena": "hack"}
    })
    assert response.status_code == 200

    session.expire_all()
    escuela = SqlDocumentStore(session).obtener(colecciones.USUARIOS, "u1")
    assert escuela["telefono"] == "8888-8888"
    assert escuela["contrasena"] == "1234"


@pytest.mark.asyncio
async def test_historial_de_ofertas(client, datos):
    activas = (await client.get("/escuelas/historialOfertasActivas", params={"userId": "u1"})).json()
    todas = (await client.get("/escuelas/historialOfertas", params={"userId": "u1"})).json()

    assert [o["id"] for o in activas["ofertasActuales"]] == ["o1"]
    assert activas["ofertasActuales"][0]["solicitudes"] == 1
    assert {o["id"] for o in todas["ofertasActuales"]} == {"o1", "o2"}


@pytest.mark.asyncio
async def test_profesores_de_la_escuela(client, datos):
    response = await client.get("/escuelas/profesoresEscuela", params={"userId": "u1"})

    assert response.json() == {"profesor": [{"id": "p1", "titulo": "Luis"}]}


@pytest.mark.asyncio
async def test_publicar_oferta(client, session, datos):
    response = await client.post("/escuelas/publiOferta", json={"data": {
        "id": "u1", "nombreCurso": "Asistencia de Redes", "profesor": "p1", "tipo": "asistencia",
        "estudiantes": 2, "horas": 10, "beneficio": "Exoneración", "descripcion": "Apoyo en laboratorio",
        "requisitos": "Redes I", "fechaInicio": "2024-02-05", "fechaCierre": "2024-06-30",
        "cursosPrevios": "Redes I, Sistemas Operativos",
    }})
    assert response.status_code == 200

    session.expire_all()
    oferta = SqlDocumentStore(session).obtener(colecciones.ASISTENCIAS, response.json()["id"])
    assert oferta["estado"] == "Revision"
    assert oferta["departamento"] == "u1"
    assert oferta["personaACargo"] == "p1"
    assert oferta["fechaFin"] == "30/06/2024"
    assert oferta["cursosPrevios"] == ["Redes I", "Sistemas Operativos"]


@pytest.mark.asyncio
async def test_publicar_oferta_incompleta(client, datos):
    response = await client.post("/escuelas/publiOferta", json={"data": {"id": "u1", "nombreCurso": "X"}})

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_historial_postulantes(client, datos):
    response = await client.get("/escuelas/historialPostulantes", params={"userId": "u1"})

    estudiantes = response.json()["estudiantes"]
    assert len(estudiantes) == 1
    assert estudiantes[0]["id"] == "e1"
    assert estudiantes[0]["carrera"] == "Computación"
    assert estudiantes[0]["ponderado"] == "85"
    assert estudiantes[0]["cursosAprobados"] == 1


def _leer(session, coleccion, doc_id):
    session.expire_all()
    return SqlDocumentStore(session).obtener(coleccion, doc_id)


@pytest.mark.asyncio
async def test_actualizar_info_admin(client, session, datos):
    response = await client.put("/escuelas/actualizarInfoAdmin", json={
        "userId": "u1", "nombre": "Escuela de Ingeniería", "facultad": "Ingeniería"
    })
    assert response.status_code == 200

    escuela = _leer(session, colecciones.USUARIOS, "u1")
    assert escuela["nombre"] == "Escuela de Ingeniería"
    assert escuela["facultad"] == "Ingeniería"
    assert escuela["telefono"] == "2222-2222"


@pytest.mark.asyncio
async def test_informacion_oferta(client, datos):
    response = await client.get("/escuelas/informacionOferta", params={"oferta": "o1"})
    assert response.status_code == 200
    info = response.json()["ofertaInfo"]
    assert info["tituloPrograma"] == "Tuto Mate"
    assert info["profesor"] == "p1"
    assert info["horas"] == "10"
    assert info["tipoPago"] == "Exoneración"

    response = await client.get("/escuelas/informacionOferta", params={"oferta": "nada"})
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_actualizar_oferta_de_la_escuela(client, session, datos):
    response = await client.put("/escuelas/actualizarOferta", json={"id": "o1", "data": {
        "id": "u1", "tituloPrograma": "Tutoría de Matemática", "fechaFin": "2024-07-01",
        "requisitos": "Cálculo I, Álgebra", "estado": "Cerrado",
    }})
    assert response.status_code == 200

    oferta = _leer(session, colecciones.ASISTENCIAS, "o1")
    assert oferta["tituloPrograma"] == "Tutoría de Matemática"
    assert oferta["fechaFin"] == "01/07/2024"
    assert oferta["requisitos"] == ["Cálculo I", "Álgebra"]
    assert oferta["estado"] == "Cerrado"
    assert oferta["departamento"] == "u1"
    assert len(oferta["historialCambios"]) == 2


@pytest.mark.asyncio
async def test_actualizar_oferta_con_transicion_invalida_no_escribe(client, session, datos):
    response = await client.put("/escuelas/actualizarOferta", json={"id": "o2", "data": {
        "tituloPrograma": "Reabierta", "estado": "Abierto",
    }})
    assert response.status_code == 400

    oferta = _leer(session, colecciones.ASISTENCIAS, "o2")
    assert oferta["tituloPrograma"] == "Vieja"
    assert oferta["estado"] == "Cerrado"


@pytest.mark.asyncio
async def test_cursos_de_la_escuela(client, datos):
    response = await client.get("/escuelas/cursosEscuela", params={"userId": "u1"})
    assert response.status_code == 200

    data = response.json()
    assert data["cursos"] == [{
        "id": "c1", "nombre": "Cálculo I", "estudiantes": ["e1"],
        "profesor": {"id": "p1", "nombre": "Luis"}, "semestre": "I-2024", "tipo": "Curso",
    }]
    assert {p["id"] for p in data["programas"]} == {"o1", "o2"}


@pytest.mark.asyncio
async def test_historial_asistencias(client, datos):
    response = await client.get("/escuelas/historialAsistencias", params={"userId": "u1"})

    historial = {h["id"]: h for h in response.json()["historialAsistencia"]}
    assert set(historial) == {"a1", "a2"}
    assert historial["a1"]["estudiante"] == "Ana"
    assert historial["a1"]["tutor"] == "Luis"
    assert historial["a1"]["curso"] == "Tuto Mate"
    assert historial["a1"]["estado"] == "Activo"
    assert historial["a2"]["tutor"] == "Sin encargado"
    assert historial["a2"]["estado"] == "Inactivo"


@pytest.mark.asyncio
async def test_beneficiarios_y_pagos_activos(client, datos):
    beneficiarios = (await client.get("/escuelas/historialBeneficiarios", params={"userId": "u1"})).json()
    activos = (await client.get("/escuelas/historialPagoAsisActivos", params={"userId": "u1"})).json()

    por_id = {b["id"]: b for b in beneficiarios}
    assert set(por_id) == {"a1", "a2"}
    assert por_id["a1"]["idEstudiante"] == "e1"
    assert por_id["a1"]["carrera"] == "Computación"
    assert por_id["a1"]["tipo"] == "Exoneración"
    assert por_id["a1"]["monto"] == 50000
    assert por_id["a1"]["estado"] == "Aprobada"
    assert por_id["a2"]["monto"] == 20000
    assert por_id["a2"]["estado"] == "Inactivo"

    assert [a["id"] for a in activos] == ["a1"]


@pytest.mark.asyncio
async def test_perfil_del_postulante(client, datos):
    response = await client.get("/escuelas/perfilEstudiantes", params={"userId": "e1"})
    assert response.status_code == 200

    perfil = response.json()
    assert perfil["estudiante"]["nombre"] == "Ana"
    assert perfil["estudiante"]["carrera"] == "Computación"
    assert perfil["estudiante"]["cursosAprobados"] == 1
    historial = {h["titulo"]: h for h in perfil["historialAsistencia"]}
    assert set(historial) == {"Tuto Mate", "Vieja", "Ajena"}
    assert historial["Tuto Mate"]["horas"] == 10
    assert historial["Tuto Mate"]["fecha"] == "05/02/2024"

    response = await client.get("/escuelas/perfilEstudiantes", params={"userId": "nadie"})
    assert response.status_code == 404
