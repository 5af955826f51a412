import logging
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ErrorAplicacion(Exception):
    """Error de negocio que el controlador convierte en una respuesta JSON."""
    status_code = 500
    campo = "message"

    def __init__(self, mensaje: str, status_code: int = None):
        super().__init__(mensaje)
        self.mensaje = mensaje
        if status_code is not None:
            self.status_code = status_code

    def cuerpo(self) -> dict:
        return {self.campo: self.mensaje}


class NoEncontrado(ErrorAplicacion):
    status_code = 404


class ValidacionFallida(ErrorAplicacion):
    status_code = 400


class TransicionInvalida(ErrorAplicacion):
    status_code = 400


class ErrorAlmacen(ErrorAplicacion):
    """El almacén de documentos no respondió. Nunca se reintenta."""
    status_code = 500
    campo = "error"

    def __init__(self, mensaje: str = "Error al acceder al almacén de datos"):
        super().__init__(mensaje)


class FalloAutenticacion(ErrorAplicacion):
    # 401: credenciales incorrectas, 402: no se pudieron validar
    status_code = 401

    def cuerpo(self) -> dict:
        return {"message": self.mensaje, "status": "error"}


def registrar_manejadores(app: FastAPI):
    @app.exception_handler(ErrorAplicacion)
    async def manejar_error_aplicacion(request: Request, exc: ErrorAplicacion):
        if isinstance(exc, ErrorAlmacen):
            logger.error("Fallo del almacén en %s %s: %r", request.method, request.url.path, exc.__cause__)
        else:
            logger.info("%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc.mensaje)
        return JSONResponse(status_code=exc.status_code, content=exc.cuerpo())

    @app.exception_handler(RequestValidationError)
    async def manejar_validacion(request: Request, exc: RequestValidationError):
        campos = ", ".join(str(e["loc"][-1]) for e in exc.errors())
        return JSONResponse(
            status_code=400,
            content={"message": f"Datos incompletos o inválidos: {campos}"},
        )
