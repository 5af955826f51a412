from typing import List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict

"""
Configuración global de la API.
    - Se carga desde variables de entorno o desde el archivo `.env`.
    - Define el almacén de documentos a utilizar (SQL local o Firestore).
    - Define la política de aprobación de postulaciones.
"""
class Settings(BaseSettings):
    # --- ALMACÉN ---
    # 'sql' guarda los documentos con SQLAlchemy, 'firestore' usa Google Cloud Firestore
    STORE_BACKEND: str = "sql"
    SQLALCHEMY_DATABASE_URL: str = "sqlite:///./approyect.db"

    FIRESTORE_PROJECT_ID: Optional[str] = None
    GOOGLE_APPLICATION_CREDENTIALS: Optional[str] = None

    # Firestore rechaza consultas 'in' con más de 10 valores
    LIMITE_CONSULTA_IN: int = 10

    # --- REGLAS DE NEGOCIO ---
    # 'libre', 'cupo' o 'cierre_automatico'
    POLITICA_APROBACION: str = "libre"
    PAGO_POR_DEFECTO: int = 2000

    # --- SERVIDOR ---
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = ["*"]

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()
