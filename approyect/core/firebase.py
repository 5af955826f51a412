from functools import lru_cache
from google.cloud import firestore
from google.oauth2 import service_account
from approyect.core.config import settings


@lru_cache(maxsize=1)
def get_firestore() -> firestore.Client:
    """Cliente único de Firestore, creado la primera vez que se usa."""
    if settings.GOOGLE_APPLICATION_CREDENTIALS:
        credenciales = service_account.Credentials.from_service_account_file(
            settings.GOOGLE_APPLICATION_CREDENTIALS
        )
        return firestore.Client(project=settings.FIRESTORE_PROJECT_ID, credentials=credenciales)
    return firestore.Client(project=settings.FIRESTORE_PROJECT_ID)
