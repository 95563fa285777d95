from filestorage_api.app import create_app
from filestorage_api.config import AppConfig, load_config
from filestorage_api.logging import setup_logging

__all__ = ["create_app", "AppConfig", "load_config", "setup_logging"]
