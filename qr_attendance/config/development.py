"""Development configuration."""
import os

from .base import Config

class DevelopmentConfig(Config):
    """Development configuration class."""
    
    DEBUG = True
    TESTING = False
    
    # Database (local SQLite unless overridden)
    SQLALCHEMY_DATABASE_URI = os.getenv('DATABASE_URL') or 'sqlite:///qr_attendance_dev.db'
    SQLALCHEMY_ECHO = False
    
    LOG_LEVEL = 'DEBUG'
