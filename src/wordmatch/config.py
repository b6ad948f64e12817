import os

BASE_DIR = os.path.dirname(os.path.abspath(__file__))


class Settings:
    PROJECT_NAME: str = "wordmatch"
    DEBUG: bool = os.environ.get("DEBUG", "false").lower() == "true"
    LOG_DIR: str = os.environ.get("LOG_DIR", "log")
    LOG_FILE: str = "wordmatch.log"
    LOG_TO_DB: bool = os.environ.get("LOG_TO_DB", "false").lower() == "true"
    DB_DIR: str = os.environ.get("DB_DIR", "db")
    DB_FILE: str = "wordmatch.db"
    VOCAB_DIR: str = os.environ.get("VOCAB_DIR", "vocabulary")
    TEMPLATES_DIR: str = os.path.join(BASE_DIR, "templates")
    STATIC_DIR: str = os.path.join(BASE_DIR, "static")

    # Game tuning
    WORD_COUNT: int = 8
    MATCH_REWARD: int = 10
    MATCH_DELAY_SECONDS: float = 0.3
    MISMATCH_DELAY_SECONDS: float = 0.8
    TICK_SECONDS: float = 1.0

    # Word pair provider
    WORD_PROVIDER: str = os.environ.get("WORD_PROVIDER", "gemini")
    GEMINI_API_KEY: str = os.environ.get("GEMINI_API_KEY", "")
    GEMINI_MODEL: str = os.environ.get("GEMINI_MODEL", "gemini-1.5-flash")
    GEMINI_BASE_URL: str = os.environ.get(
        "GEMINI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta"
    )
    PROVIDER_TIMEOUT_SECONDS: float = float(
        os.environ.get("PROVIDER_TIMEOUT_SECONDS", "30")
    )

    SESSION_COOKIE_NAME: str = "wordmatch_session_id"
    SESSION_TIMEOUT_MINUTES: int = 120
    ROOT_PATH: str = os.environ.get("ROOT_PATH", "")


settings = Settings()
