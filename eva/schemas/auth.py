from pydantic import BaseModel, ConfigDict


class LoginRequest(BaseModel):
    # username o email
    username: str
    password: str


class ActorContext(BaseModel):
    """Usuario autenticado de la petición; se pasa explícito a stores y servicios."""
    model_config = ConfigDict(from_attributes=True)
    id: int
    username: str
    email: str | None = None
    nombre: str | None = None
    apellido: str | None = None
    rol: str | None = None
    servicio_id: int | None = None
    jti: str | None = None


class UsuarioPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    nombre: str
    apellido: str
    email: str
    username: str
    rol_id: int
    servicio_id: int | None = None
    estado: bool


class TokenResponse(BaseModel):
    user: UsuarioPublic
    token: str
    token_type: str = "Bearer"
    expires_in: int
