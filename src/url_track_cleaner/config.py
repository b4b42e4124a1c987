from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {
        "env_prefix": "URL_TRACK_CLEANER_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }

    # Rule set + redirect policy (YAML, see config/cleaner.yaml)
    config_path: str = "config/cleaner.yaml"

    # Overrides the user agent from the config file when set
    user_agent: str | None = None

    # Seconds, applied to connect/read/write/pool of the probe request
    timeout: float = 10.0

    log_level: str = "INFO"


settings = Settings()
