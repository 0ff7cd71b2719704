"""
Configuration de l'application / Application configuration.
Utilise pydantic-settings pour charger depuis .env ou variables d'environnement.
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Application
    APP_NAME: str = "FleetDesk"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = True

    # Database - SQLite par défaut pour le développement
    # Database - SQLite by default for development
    DATABASE_URL: str = "sqlite+aiosqlite:///./fleetdesk.db"
    SQL_ECHO: bool = False

    # CORS - origines autorisées / allowed origins
    CORS_ORIGINS: list[str] = ["http://localhost:5173", "http://localhost:3000"]

    # Rate Limiting
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_DEFAULT: str = "60/minute"
    RATE_LIMIT_EXPORT: str = "20/minute"

    # Tableau de bord / Dashboard
    TOP_CONSUMERS_LIMIT: int = 5
    # Conserver la distance du premier plein dans la fenetre /
    # Keep the distance of the first in-window fill-up (predecessor before `from`)
    CARRY_ODOMETER_BASELINE: bool = False

    # Echeances / Deadlines
    DEADLINE_ALERT_WINDOW_DAYS: int = 30

    # Sources carburant initiales / Seeded fuel sources ("type:IDENTIFIER")
    DEFAULT_FUEL_SOURCES: list[str] = ["card:CARD-001", "tank:TANK-CENTRALE"]

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
