from pydantic import BaseModel


class LoginRequest(BaseModel):
    # Sin validar formato: basta con que coincida con el correo guardado
    email: str
    password: str


class LoginResponse(BaseModel):
    message: str
    status: str
    rol: str
    id: str
