from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Portal backend serving /components/health and /cis-public/proxy
    health_api_base_url: str = "http://localhost:7008/api/v1"

    # Component/landscape registry
    registry_path: str = "config/registry.yml"

    # Health polling
    probe_timeout_seconds: float = 10.0
    health_stale_seconds: float = 60.0
    health_gc_seconds: float = 300.0
    health_retry_count: int = 1
    health_max_sessions: int = 1000

    # App
    log_level: str = "INFO"
    debug: bool = True

    class Config:
        env_file = ".env"


settings = Settings()
