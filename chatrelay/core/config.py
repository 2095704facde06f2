# chatrelay/core/config.py

import logging
import sys
import os

# Check if running in cloud environment (like Azure)
# If not, assume local development and load .env
if os.getenv("WEBSITE_SITE_NAME") is None:
    from dotenv import load_dotenv

    # Load environment variables from .env file in the project root
    dotenv_path = os.path.join(os.path.dirname(__file__), "..", "..", ".env")
    load_dotenv(dotenv_path=dotenv_path)


class Settings:
    """Simple settings object to hold configuration values"""

    def __init__(self):
        self.LARK_APP_ID = os.getenv("LARK_APP_ID", "")
        self.LARK_APP_SECRET = os.getenv("LARK_APP_SECRET", "")
        self.LARK_DOMAIN = os.getenv("LARK_DOMAIN", "https://open.larksuite.com")
        self.FLOWISE_API_URL = os.getenv("FLOWISE_API_URL", "")
        self.DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./chatrelay.db")
        self.PORT = int(os.getenv("PORT", "3000"))

        # Missing credentials are reported by the doctor, not fatal here
        if not self.LARK_APP_ID:
            logging.warning("LARK_APP_ID environment variable not set.")
        if not self.LARK_APP_SECRET:
            logging.warning("LARK_APP_SECRET environment variable not set.")
        if not self.FLOWISE_API_URL:
            logging.warning("FLOWISE_API_URL environment variable not set.")


def configure_logging():
    """Configure application logging"""
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stdout,
    )


# Create global settings instance
settings = Settings()
