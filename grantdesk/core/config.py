import os
from dataclasses import dataclass
from typing import List

from dotenv import load_dotenv


load_dotenv()


DEFAULT_FUNCTION_NAME = "make-server-6c78dd6b"


@dataclass(frozen=True)
class Config:
    """Console configuration loaded from environment variables.

    The records API is a Supabase edge function; its base URL is derived from
    the project id unless GRANTS_API_BASE overrides it.
    """

    SUPABASE_PROJECT_ID: str = os.getenv("SUPABASE_PROJECT_ID", "")
    SUPABASE_ANON_KEY: str = os.getenv("SUPABASE_ANON_KEY", "")
    GRANTS_FUNCTION_NAME: str = os.getenv("GRANTS_FUNCTION_NAME", DEFAULT_FUNCTION_NAME)
    GRANTS_API_BASE: str = os.getenv("GRANTS_API_BASE", "")
    HTTP_TIMEOUT_SECONDS: float = float(os.getenv("HTTP_TIMEOUT_SECONDS", "30"))
    MAX_UPLOAD_BYTES: int = int(os.getenv("MAX_UPLOAD_BYTES", str(10 * 1024 * 1024)))
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "production")

    CORS_ALLOWED_ORIGINS_ENV: str = os.getenv("CORS_ALLOWED_ORIGINS", "http://localhost:3000")

    def api_base(self) -> str:
        if self.GRANTS_API_BASE:
            return self.GRANTS_API_BASE.rstrip("/")
        if not self.SUPABASE_PROJECT_ID:
            return ""
        return f"https://{self.SUPABASE_PROJECT_ID}.supabase.co/functions/v1/{self.GRANTS_FUNCTION_NAME}"

    def allowed_origins(self, extra_origins: List[str] | None = None) -> List[str]:
        env_origins = [o.strip() for o in self.CORS_ALLOWED_ORIGINS_ENV.split(",") if o.strip()]
        defaults = [
            "http://localhost:5173",
        ]
        merged = env_origins + defaults
        if extra_origins:
            merged.extend(extra_origins)
        # Deduplicate while preserving order
        seen = set()
        result: List[str] = []
        for origin in merged:
            if origin not in seen:
                seen.add(origin)
                result.append(origin)
        return result

    def validate(self) -> None:
        if not self.api_base():
            raise ValueError("SUPABASE_PROJECT_ID or GRANTS_API_BASE environment variable is required")
        if not self.SUPABASE_ANON_KEY:
            raise ValueError("SUPABASE_ANON_KEY environment variable is required")
