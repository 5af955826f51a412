import pytest

from approyect.core import store as colecciones
from approyect.core.store import SqlDocumentStore
from tests.test_db import sembrar


@pytest.fixture
def datos(session):
    sembrar(session, colecciones.USUARIOS,
            {"id": "u1", "tipoUsuario": "Escuela", "carrera": "Computación", "nombre": "Escuela de Computación"},
            {"id": "u2", "tipoUsuario": "Estudiante", "carrera": "u1", "nombre": "Ana", "contrasena": "1234"},
            {"id": "p1", "tipoUsuario": "Profesor", "nombre": "Luis"})
    sembrar(session, colecciones.ASISTENCIAS,
            {"id": "o1", "tituloPrograma": "tuto mate", "estado": "Abierto", "personaACargo": "p1",
             "departamento": "u1", "totalHoras": "4", "cantidadSolicitudes": "2", "postulaciones": ["e9"]},
            {"id": "o2", "tituloPrograma": "Cerrada", "estado": "Cerrado"})


@pytest.mark.asyncio
async def test_info_estudiante(client, datos):
    response = await client.get("/estudiantes/infoEstudiantes", params={"userId": "u2"})

    assert response.status_code == 200
    datos_estudiante = response.json()["datos"]
    assert datos_estudiante["carrera"] == "Computación"
    assert "contrasena" not in datos_estudiante


@pytest.mark.asyncio
async def test_info_estudiante_inexistente(client, datos):
    response = await client.get("/estudiantes/infoEstudiantes", params={"userId": "nadie"})

    assert response.status_code == 404
    assert response.json() == {"message": "Usuario no encontrado"}


@pytest.mark.asyncio
async def test_registrar_perfil(client, session, datos):
    response = await client.post("/estudiantes/registrarPerfil", json={
        "userId": "u2", "carrera": "u1", "nivelAcademico": "Tercer año", "promedio": 88.5
    })
    assert response.status_code == 200

    session.expire_all()
    usuario = SqlDocumentStore(session).obtener(colecciones.USUARIOS, "u2")
    assert usuario["nivelAcademico"] == "Tercer año"
    assert usuario["ponderado"] == 88.5

    response = await client.post("/estudiantes/registrarPerfil", json={"userId": "u2", "promedio": 9})
    assert response.status_code == 200
    session.expire_all()
    ponderado = SqlDocumentStore(session).obtener(colecciones.USUARIOS, "u2")["ponderado"]
    assert ponderado == 9 and isinstance(ponderado, int)

    response = await client.post("/estudiantes/registrarPerfil", json={"userId": "nadie"})
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_carreras_y_oportunidades(client, datos):
    carreras = (await client.get("/estudiantes/carreras")).json()
    oportunidades = (await client.get("/asistencias/oportunidades")).json()["oportunidades"]

    assert carreras == {"carreras": ["Computación"]}
    assert [o["id"] for o in oportunidades] == ["o1"]
    assert oportunidades[0]["encargado"] == "Luis"
    assert oportunidades[0]["escuela"] == "Escuela de Computación"


@pytest.mark.asyncio
async def test_registrar_solicitud(client, session, datos):
    response = await client.post("/solicitudes/registrar", json={
        "tituloOportunidad": " Tuto Mate", "userId": "u2", "nombre": "Ana", "promedio": 90, "horas": 5
    })
    assert response.status_code == 200
    assert response.json() == {"mensaje": "Solicitud registrada correctamente"}

    session.expire_all()
    store = SqlDocumentStore(session)
    solicitudes = store.listar(colecciones.SOLICITUDES)
    assert len(solicitudes) == 1
    assert solicitudes[0]["estado"] == "Pendiente"
    assert solicitudes[0]["reunion"] is False
    assert solicitudes[0]["asistenciaId"] == "o1"

    oferta = store.obtener(colecciones.ASISTENCIAS, "o1")
    assert oferta["postulaciones"] == ["e9", "u2"]
    assert oferta["cantidadSolicitudes"] == 3


@pytest.mark.asyncio
async def test_registrar_solicitud_dos_veces_no_repite_postulacion(client, session, datos):
    for _ in range(2):
        await client.post("/solicitudes/registrar", json={"tituloOportunidad": "tuto mate", "userId": "u2"})

    session.expire_all()
    oferta = SqlDocumentStore(session).obtener(colecciones.ASISTENCIAS, "o1")
    assert oferta["postulaciones"] == ["e9", "u2"]
    assert oferta["cantidadSolicitudes"] == 4


@pytest.mark.asyncio
async def test_registrar_solicitud_incompleta(client, datos):
    response = await client.post("/solicitudes/registrar", json={"userId": "u2"})

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_seguimiento(client, datos):
    await client.post("/solicitudes/registrar", json={"tituloOportunidad": "tuto mate", "userId": "u2", "horas": "3"})

    response = await client.get("/solicitudes/seguimiento", params={"userId": "u2"})
    assert response.status_code == 200
    solicitudes = response.json()["solicitudes"]
    assert len(solicitudes) == 1
    assert solicitudes[0]["responsable"] == "Luis"
    assert solicitudes[0]["horasTrabajadas"] == 3

    response = await client.get("/solicitudes/seguimiento")
    assert response.status_code == 400
    assert response.json() == {"message": "Falta el ID del usuario"}
