from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from approyect.core.config import settings
from approyect.core.database import Base, engine
from approyect.core.errores import registrar_manejadores
from approyect.core.logger_config import setup_logging
# Importamos el modelo para la creación de la tabla de documentos
from approyect.models import documentos
# Importamos los controladores
from approyect.controllers import (
    admin_controller, auth_controller, escuelas_controller, estudiantes_controller, profesores_controller
)

setup_logging()

# Solo hace falta la tabla cuando el almacén es SQL
if settings.STORE_BACKEND != "firestore":
    Base.metadata.create_all(bind=engine)

app = FastAPI(title="ApProyect API - Asistencias y Tutorías")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

registrar_manejadores(app)

# REGISTRO DE RUTAS
app.include_router(auth_controller.router)
app.include_router(admin_controller.router)
app.include_router(estudiantes_controller.router)
app.include_router(profesores_controller.router)
app.include_router(escuelas_controller.router)

@app.get("/")
def root():
    return {"message": "API ApProyect - Servidor en línea", "almacen": settings.STORE_BACKEND}
