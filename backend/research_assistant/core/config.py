from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # core
    ENV: str = "dev"
    API_PREFIX: str = "/api"
    LOG_LEVEL: str = "INFO"

    # auth / security
    FRONTEND_ORIGIN: str | None = None
    # Explicit debug-only switch for wide-open CORS in non-prod envs
    CORS_ALLOW_ALL_ORIGINS: bool = False

    # llm (OpenAI-compatible chat completions; Groq by default)
    GROQ_API_KEY: str | None = None  # Required for every search request
    LLM_BASE_URL: str = "https://api.groq.com/openai/v1"
    LLM_MODEL: str = "llama-3.3-70b-versatile"
    LLM_TEMPERATURE: float = 0.2
    LLM_MAX_TOKENS: int = 2000

    # optional source credentials; absence disables only that source
    YOUTUBE_API_KEY: str | None = None
    NEWS_API_KEY: str | None = None
    NEWS_LANGUAGE: str = "en"
    STACKEXCHANGE_KEY: str | None = None  # public API works without it, key raises quota
    X_BEARER_TOKEN: str | None = None
    FB_GRAPH_TOKEN: str | None = None

    # generic page reader proxy
    READER_BASE_URL: str = "https://r.jina.ai"

    # outbound http
    HTTP_TIMEOUT_SECONDS: float = 20.0

    # result caps
    REDDIT_MAX_RESULTS: int = 5
    HN_MAX_RESULTS: int = 5
    WIKIPEDIA_MAX_RESULTS: int = 5
    YOUTUBE_MAX_RESULTS: int = 5
    NEWS_MAX_RESULTS: int = 5
    PROFILE_MAX_ITEMS: int = 5
    # Reserved for a general web search integration; no enabled connector reads it
    WEB_MAX_RESULTS: int = 10
    CORPUS_MAX_RECORDS: int = 25

    class Config:
        env_file = ".env"
        case_sensitive = True

    @property
    def llm_configured(self) -> bool:
        return bool((self.GROQ_API_KEY or "").strip())


@lru_cache
def get_settings() -> Settings:
    return Settings()
