from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # SerpAPI (required at request time)
    serpapi_api_key: str = ""
    serpapi_timeout_seconds: float = 30.0

    # Model provider
    llm_provider: str = ""  # "" (auto) | openai | openrouter | heuristic
    openai_api_key: str = ""
    openai_model: str = "gpt-4o-mini"
    openrouter_api_key: str = ""
    openrouter_base_url: str = "https://openrouter.ai/api/v1"
    llm_model: str = "deepseek/deepseek-r1:free"  # OpenRouter model id
    llm_timeout_seconds: float = 15.0
    llm_temperature: float = 0.2

    # Pipeline caps
    max_queries: int = 2
    max_candidates: int = 8  # default results per query
    result_cap: int = 50
    max_parallel_search: int = 1
    max_parallel_extract: int = 1

    # App
    cors_origins: str = "http://localhost:3000"
    app_log_level: str = "INFO"
    noisy_log_level: str = "WARNING"
    log_dir: str = "logs"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",")]


settings = Settings()
