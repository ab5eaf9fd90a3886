from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    database_url: str = "sqlite+aiosqlite:///./company_intel.db"
    create_tables: bool = True
    anthropic_api_key: str = ""
    anthropic_model: str = "claude-sonnet-4-20250514"
    fetch_timeout: float = 15.0
    fetch_max_redirects: int = 5
    user_agent: str = "Mozilla/5.0 (compatible; CompanyIntelBot/1.0)"
    log_level: str = "INFO"
