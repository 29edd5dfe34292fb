from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # --- Runtime ---
    ENV: str = "dev"  # dev|prod
    LOG_LEVEL: str = "INFO"
    API_TITLE: str = "Propvest - Deal Calculators"

    # --- Input sanity caps (HTTP only; the domain functions have no upper bounds) ---
    MAX_PURCHASE_PRICE: float = 50_000_000.0
    MAX_MONTHLY_RENT: float = 100_000.0
    MAX_ROOMS: int = 20

    # --- Scenario tools ---
    # JSON list in env, e.g. STRESS_TEST_RATE_INCREASES='[0, 1, 2, 3, 4]'
    STRESS_TEST_RATE_INCREASES: list[float] = [0.0, 1.0, 2.0, 3.0, 4.0]
    MAX_SIMULATION_ITERATIONS: int = 10_000
    MONTE_CARLO_THRESHOLDS: list[float] = [0.0, 100.0, 200.0]


settings = Settings()
