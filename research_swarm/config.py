from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # OpenRouter
    openrouter_api_key: str = ""
    openrouter_base_url: str = "https://openrouter.ai/api/v1"
    default_model: str = "google/gemini-2.5-flash"
    openrouter_model: str = ""
    planner_model: str = ""  # optional override for plan generation only
    retrieval_model: str = ""  # optional override for search summarisation
    extraction_model: str = ""  # optional override for fact extraction
    synthesis_model: str = ""  # optional override for the final report

    # Generation controls
    planner_temperature: float = 0.3
    synthesis_temperature: float = 0.4
    planner_max_tokens: int = 2048
    retrieval_max_tokens: int = 4096
    extraction_max_tokens: int = 4096
    synthesis_max_tokens: int = 8192

    # Search provider
    search_provider: str = "tavily"  # tavily | brave
    tavily_api_key: str = ""
    brave_api_key: str = ""
    search_fallback_to_tavily: bool = True
    search_depth: str = "advanced"  # basic | advanced
    search_max_results: int = 8
    retrieval_snippet_chars: int = 1200

    # Pipeline
    planner_max_dimensions: int = 5
    swarm_max_parallel: int = 8
    extract_max_parallel: int = 8
    extraction_char_budget: int = Field(default=15000, gt=0)
    research_depth: int = 3

    # App
    cors_origins: str = "http://localhost:3000"
    app_log_level: str = "INFO"
    noisy_log_level: str = "WARNING"
    log_dir: str = "logs"
    log_to_file: bool = True

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",")]


settings = Settings()
