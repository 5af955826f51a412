from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from approyect.core.database import Base
from approyect.models.documentos import Documento

# Base de datos de prueba (en memoria, compartida entre hilos)
TEST_DATABASE_URL = "sqlite://"

engine_test = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine_test)

# Crea la tabla de documentos vacía
def init_test_db():
    Base.metadata.drop_all(bind=engine_test)
    Base.metadata.create_all(bind=engine_test)

# Devuelve una sesión de prueba (para override)
def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()

# Inserta documentos con IDs fijos: sembrar(session, "Usuarios", {"id": "u1", ...}, ...)
def sembrar(session, coleccion, *documentos):
    for doc in documentos:
        datos = {k: v for k, v in doc.items() if k != "id"}
        session.add(Documento(coleccion=coleccion, id=doc["id"], datos=datos))
    session.commit()
