# nvds_admin/config.py

from pathlib import Path
from typing import List, Optional

from pydantic_settings import BaseSettings
from sqlalchemy.engine import URL


class Settings(BaseSettings):
    # Base de datos (opcional). DATABASE_URL acepta cualquier URL de SQLAlchemy,
    # las variables MYSQL_* construyen una URL de MySQL.
    DATABASE_URL: Optional[str] = None
    MYSQL_URL: Optional[str] = None
    MYSQL_HOST: Optional[str] = None
    MYSQL_PORT: int = 3306
    MYSQL_USER: Optional[str] = None
    MYSQL_PASSWORD: str = ""
    MYSQL_DATABASE: Optional[str] = None
    MYSQL_POOL_SIZE: int = 10
    MYSQL_TABLE_PREFIX: str = "nvds_"

    # Archivos
    SITE_ROOT: str = "."
    DATA_DIR: str = "server/data"
    UPLOAD_DIR: str = "assets/uploads"
    MAX_IMAGE_SIZE: int = 8 * 1024 * 1024  # 8 MB

    # Servidor
    HOST: str = "0.0.0.0"
    PORT: int = 4000
    LOG_LEVEL: str = "INFO"

    # CORS
    FRONTEND_URLS: str = "*"

    @property
    def database_enabled(self) -> bool:
        return bool(
            self.DATABASE_URL
            or self.MYSQL_URL
            or self.MYSQL_HOST
            or self.MYSQL_USER
            or self.MYSQL_DATABASE
        )

    @property
    def database_url(self) -> Optional[str]:
        """URL de SQLAlchemy para el backend relacional, o None si no está configurado."""
        if self.DATABASE_URL:
            return self.DATABASE_URL
        if self.MYSQL_URL:
            url = self.MYSQL_URL
            if url.startswith("mysql://"):
                url = "mysql+pymysql://" + url[len("mysql://"):]
            return url
        if not self.database_enabled:
            return None
        host = self.MYSQL_HOST or "localhost"
        user = self.MYSQL_USER or "root"
        database = self.MYSQL_DATABASE or "nvds"
        url = URL.create(
            "mysql+pymysql",
            username=user,
            password=self.MYSQL_PASSWORD or None,
            host=host,
            port=self.MYSQL_PORT,
            database=database,
            query={"charset": "utf8mb4"},
        )
        return url.render_as_string(hide_password=False)

    @property
    def site_root(self) -> Path:
        return Path(self.SITE_ROOT).resolve()

    def _resolve_dir(self, value: str) -> Path:
        path = Path(value)
        if not path.is_absolute():
            path = self.site_root / path
        return path.resolve()

    @property
    def data_dir(self) -> Path:
        return self._resolve_dir(self.DATA_DIR)

    @property
    def content_file(self) -> Path:
        return self.data_dir / "content.json"

    @property
    def upload_dir(self) -> Path:
        return self._resolve_dir(self.UPLOAD_DIR)

    @property
    def allowed_origins(self) -> List[str]:
        urls = [url.strip() for url in self.FRONTEND_URLS.split(",")]
        return [url for url in urls if url] or ["*"]

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
