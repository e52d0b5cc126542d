import json
import logging
import os
from currency_exchange.client.config import SERVER_IP, SERVER_PORT, API_PORT

logger = logging.getLogger('Currency-Exchange')


class Settings:
    def __init__(self, filename="client_settings.json"):
        self.filename = filename
        self.default_settings = {
            "server_ip": SERVER_IP,
            "server_port": SERVER_PORT,
            "api_port": API_PORT,
            "from_currency": "USD",
            "to_currency": "EUR"
        }
        self.settings = self.load()

    def load(self):
        """Load settings from JSON file"""
        if os.path.exists(self.filename):
            try:
                with open(self.filename, 'r', encoding='utf-8') as f:
                    loaded = json.load(f)
                # Merge with defaults to ensure all keys exist
                settings = self.default_settings.copy()
                settings.update(loaded)
                return settings
            except (OSError, ValueError) as e:
                logger.warning(f"Error loading settings: {e}")
                return self.default_settings.copy()
        return self.default_settings.copy()

    def save(self):
        """Save settings to JSON file"""
        try:
            with open(self.filename, 'w', encoding='utf-8') as f:
                json.dump(self.settings, f, indent=4, ensure_ascii=False)
            return True
        except OSError as e:
            logger.warning(f"Error saving settings: {e}")
            return False

    def get(self, key, default=None):
        return self.settings.get(key, default)

    def update(self, **kwargs):
        """Update multiple settings at once"""
        self.settings.update(kwargs)
