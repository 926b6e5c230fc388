"""
Configuration settings for the vault simulation API

Loads environment variables and provides application configuration.
"""
import os
from typing import List
from dotenv import load_dotenv

from lp_vault.constants import ZERO_ADDRESS, DEFAULT_BASE_FEE, DEFAULT_BASE_FEE_SPLIT

# Load environment variables from .env file
load_dotenv()


class Settings:
    """Application settings"""

    # API Configuration
    API_VERSION: str = os.getenv("API_VERSION", "0.1.0")
    API_TITLE: str = os.getenv("API_TITLE", "LP Vault Simulation API")
    API_DESCRIPTION: str = "Two-position LP vault accounting and rebalancing over a concentrated-liquidity pool"

    # CORS Configuration
    CORS_ORIGINS: List[str] = os.getenv(
        "CORS_ORIGINS",
        "http://localhost:3000"
    ).split(",")

    # Server Configuration
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", 8000))
    DEBUG: bool = os.getenv("DEBUG", "False").lower() == "true"
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # Factory Configuration (fee settings read by all vaults at harvest)
    FACTORY_OWNER: str = os.getenv("FACTORY_OWNER", "0x" + "1" * 40)
    FEE_RECIPIENT: str = os.getenv("FEE_RECIPIENT", ZERO_ADDRESS)
    DEFAULT_BASE_FEE: int = int(os.getenv("DEFAULT_BASE_FEE", DEFAULT_BASE_FEE))
    DEFAULT_BASE_FEE_SPLIT: int = int(os.getenv("DEFAULT_BASE_FEE_SPLIT", DEFAULT_BASE_FEE_SPLIT))


# Create global settings instance
settings = Settings()
