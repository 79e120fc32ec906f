from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="CS_",
    )

    # Monte Carlo simulation
    simulation_num_paths: int = 10000
    simulation_num_periods: int = 12  # months

    # Parallelization
    simulation_max_workers: int = 4
    simulation_chunk_size: int = 2500

    # Logging
    log_dir: str = "logs"
    log_level: str = "INFO"
