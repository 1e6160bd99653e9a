from __future__ import annotations

import os
from dataclasses import dataclass, field

DEFAULT_ALLOWED_EXTENSIONS = [".jpg", ".jpeg", ".png", ".gif", ".pdf", ".doc", ".docx"]


def _csv(raw: str) -> list[str]:
    return [s for s in [p.strip() for p in raw.split(",")] if s]


@dataclass
class Config:
    secret_key: str = "change-me"
    database_url: str = "sqlite:///careportal.db"
    cors_allowed_origins: list[str] = field(default_factory=list)
    jwt_secrets: list[str] = field(default_factory=list)  # first element used for signing; all accepted for verification
    jwt_issuer: str = "CarePortal"
    jwt_audience: str = "CarePortal"
    jwt_expires_minutes: int = 60
    jwt_leeway_seconds: int = 60
    # Empty upload paths resolve to <instance>/uploads/{documents,incidents}
    upload_document_path: str = ""
    upload_incident_path: str = ""
    upload_base_url: str = "/uploads"
    upload_max_file_size_mb: int = 50
    upload_allowed_extensions: list[str] = field(default_factory=lambda: list(DEFAULT_ALLOWED_EXTENSIONS))
    metadata_cache_seconds: int = 300
    seed_admin_email: str = "admin@careportal.com"
    seed_admin_password: str = "Admin@123"
    dev_create_all: bool = False
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> Config:
        exts = os.getenv("UPLOAD_ALLOWED_EXTENSIONS", "")
        return cls(
            secret_key=os.getenv("SECRET_KEY", "change-me"),
            database_url=os.getenv("DATABASE_URL", "sqlite:///careportal.db"),
            cors_allowed_origins=_csv(os.getenv("CORS_ALLOW_ORIGINS", "")),
            # JWT_SECRETS allows key rotation: comma-separated secrets; first used for signing.
            jwt_secrets=_csv(os.getenv("JWT_SECRETS", "")),
            jwt_issuer=os.getenv("JWT_ISSUER", "CarePortal"),
            jwt_audience=os.getenv("JWT_AUDIENCE", "CarePortal"),
            jwt_expires_minutes=int(os.getenv("JWT_EXPIRES_MINUTES", "60")),
            jwt_leeway_seconds=int(os.getenv("JWT_LEEWAY_SECONDS", "60")),
            upload_document_path=os.getenv("UPLOAD_DOCUMENT_PATH", ""),
            upload_incident_path=os.getenv("UPLOAD_INCIDENT_PATH", ""),
            upload_base_url=os.getenv("UPLOAD_BASE_URL", "/uploads"),
            upload_max_file_size_mb=int(os.getenv("UPLOAD_MAX_FILE_SIZE_MB", "50")),
            upload_allowed_extensions=[e.lower() for e in _csv(exts)] or list(DEFAULT_ALLOWED_EXTENSIONS),
            metadata_cache_seconds=int(os.getenv("METADATA_CACHE_SECONDS", "300")),
            seed_admin_email=os.getenv("SEED_ADMIN_EMAIL", "admin@careportal.com"),
            seed_admin_password=os.getenv("SEED_ADMIN_PASSWORD", "Admin@123"),
            dev_create_all=os.getenv("DEV_CREATE_ALL", "0").lower() in ("1", "true", "yes"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )

    def override(self, d: dict):
        for k, v in d.items():
            if hasattr(self, k):
                setattr(self, k, v)

    def to_flask_dict(self):
        return {
            "SECRET_KEY": self.secret_key,
            "SQLALCHEMY_DATABASE_URI": self.database_url,
            "CORS_ALLOWED_ORIGINS": self.cors_allowed_origins,
            "JWT_SECRETS": self.jwt_secrets,
            "JWT_ISSUER": self.jwt_issuer,
            "JWT_AUDIENCE": self.jwt_audience,
            "JWT_EXPIRES_MINUTES": self.jwt_expires_minutes,
            "JWT_LEEWAY_SECONDS": self.jwt_leeway_seconds,
            "UPLOAD_DOCUMENT_PATH": self.upload_document_path,
            "UPLOAD_INCIDENT_PATH": self.upload_incident_path,
            "UPLOAD_BASE_URL": self.upload_base_url,
            "UPLOAD_MAX_FILE_SIZE_MB": self.upload_max_file_size_mb,
            "UPLOAD_ALLOWED_EXTENSIONS": self.upload_allowed_extensions,
            # Werkzeug rejects bigger bodies before they reach the upload service
            "MAX_CONTENT_LENGTH": (self.upload_max_file_size_mb + 1) * 1024 * 1024,
            "METADATA_CACHE_SECONDS": self.metadata_cache_seconds,
            "SEED_ADMIN_EMAIL": self.seed_admin_email,
            "SEED_ADMIN_PASSWORD": self.seed_admin_password,
            "DEV_CREATE_ALL": self.dev_create_all,
            "LOG_LEVEL": self.log_level,
        }
