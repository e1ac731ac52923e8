"""Application configuration using Pydantic settings."""
from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str

    environment: str = "development"

    # CORS
    allowed_origins: str = "http://localhost:3000,http://localhost:3001"

    # Identity provider (Clerk). JWKS for RS256 session tokens, shared secret for HS256.
    clerk_jwks_url: Optional[str] = None
    clerk_issuer: Optional[str] = None
    idp_jwt_secret: Optional[str] = None

    # Subjects that are stored as admins on first contact
    bootstrap_admin_subjects: str = ""

    # Supabase Storage
    supabase_url: Optional[str] = None
    supabase_secret_key: Optional[str] = None  # Secret key (sb_secret_...) for server-side operations
    storage_bucket: str = "listing-photos"
    storage_public_bucket: bool = False
    signed_url_expires_in: int = 3600

    @property
    def cors_origins(self) -> List[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.allowed_origins.split(",")]

    @property
    def admin_subjects(self) -> List[str]:
        """Parse bootstrap admin subjects from comma-separated string."""
        return [s.strip() for s in self.bootstrap_admin_subjects.split(",") if s.strip()]

    class Config:
        env_file = ".env"
        case_sensitive = False


settings = Settings()
