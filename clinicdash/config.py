import os
from dotenv import load_dotenv

load_dotenv()


class Settings:
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./clinicdash.db")
    PHI_ENCRYPTION_KEY: str = os.getenv("PHI_ENCRYPTION_KEY", "")
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # "memory" keeps patients in a seeded in-process repository,
    # "database" persists them through SQLAlchemy.
    PATIENT_STORE: str = os.getenv("PATIENT_STORE", "memory")
    SEED_DEMO_DATA: bool = os.getenv("SEED_DEMO_DATA", "true").lower() in ("1", "true", "yes")

    DEFAULT_LOCALE: str = os.getenv("DEFAULT_LOCALE", "de-CH")
    MAX_PATIENT_AGE_YEARS: int = int(os.getenv("MAX_PATIENT_AGE_YEARS", "110"))


settings = Settings()
