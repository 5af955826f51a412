from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from approyect.core.config import settings

# --- CONFIGURACIÓN ---
SQLALCHEMY_DATABASE_URL = settings.SQLALCHEMY_DATABASE_URL

connect_args = {}
if SQLALCHEMY_DATABASE_URL.startswith("sqlite"):
    # FastAPI atiende los endpoints síncronos en varios hilos
    connect_args = {"check_same_thread": False}

engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args=connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
