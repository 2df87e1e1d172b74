"""
Application configuration loader and it handles:
- Environment variables
- Text-generation provider settings
- Planner model configuration
- Trace database configuration

And, the main purpose:
Central place for system configuration.
"""


from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite+aiosqlite:///./stepplan.db"

    # LLM
    LLM_PROVIDER: str = "gemini"  # gemini | groq | mock (for no-key dev)
    GEMINI_API_KEY: str = ""
    GEMINI_BASE_URL: str = "https://generativelanguage.googleapis.com/v1beta"
    GROQ_API_KEY: str = ""
    GROQ_BASE_URL: str = "https://api.groq.com/openai/v1"
    LLM_MODEL: str = "gemini-2.5-flash"
    LLM_TIMEOUT_SECONDS: float = 30.0

    # Planner (fast model: planning gates the real work)
    PLANNER_MODEL: str = "gemini-2.0-flash"
    PLANNER_TEMPERATURE: float = 0.2

    # Observability
    PLAN_TRACE_ENABLED: bool = True
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        extra = "ignore"

settings = Settings()
