from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Note source settings
    notes_path: str = "data/notes.json"

    # Layout settings
    viewport_width: float = 960.0
    viewport_height: float = 600.0
    max_layout_ticks: int = 300
    layout_seed: int = 0

    log_level: str = "INFO"  # Can be DEBUG, INFO, WARNING, ERROR, CRITICAL


settings = Settings()
