"""Configuration loader for Church RSVP with environment-specific support"""

import os
from pathlib import Path

from dotenv import load_dotenv

server_dir = Path(__file__).parent.parent.parent
env_path = server_dir / ".env"

# Load .env file if it exists. For local development only.
if env_path.exists():
    load_dotenv(env_path)

# Configuration dictionary - set once at initialization
config = {
    "database_url": os.getenv("DATABASE_URL"),
    "app_port": int(os.getenv("APP_PORT", "8080")),
    "log_level": os.getenv("LOG_LEVEL", "INFO"),
    "app_base_url": os.getenv("APP_BASE_URL"),
    "mailgun_api_key": os.getenv("MAILGUN_API_KEY"),
    "mailgun_domain": os.getenv("MAILGUN_DOMAIN"),
    "sender_email": os.getenv("SENDER_EMAIL"),
    # Listing screens show ten registrations per page
    "default_page_size": int(os.getenv("DEFAULT_PAGE_SIZE", "10")),
    "max_page_size": int(os.getenv("MAX_PAGE_SIZE", "100")),
    "environment": os.getenv("ENVIRONMENT"),
}
