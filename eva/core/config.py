# eva/core/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./eva.db"
    DB_ECHO: bool = False
    JWT_SECRET: str
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 480

    APP_VERSION: str = "1.0.0"

    # Orígenes permitidos para el frontend (React en dev y el dominio del hospital)
    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]

    # 📁 Raíz de almacenamiento de archivos subidos (manuales, certificados, imágenes...)
    FILES_DIR: str = "./storage"
    MAX_UPLOAD_MB: int = 50

    # Paginación de listados
    DEFAULT_PER_PAGE: int = 15
    MAX_PER_PAGE: int = 100

    # Dashboard: 15 minutos de caché para las estadísticas generales
    DASHBOARD_CACHE_TTL_SECONDS: int = 900

    # Solo en desarrollo: incluye el texto de la excepción en respuestas 500
    EXPOSE_ERROR_DETAIL: bool = False

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",  # no falla si agregas más variables en .env
    )


settings = Settings()
