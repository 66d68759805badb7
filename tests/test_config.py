"""Environment configuration selection."""
from datetime import timedelta

from qr_attendance.config import get_config
from qr_attendance.config.development import DevelopmentConfig
from qr_attendance.config.production import ProductionConfig
from qr_attendance.config.testing import TestingConfig

def test_get_config_by_name():
    assert get_config('production') is ProductionConfig
    assert get_config('testing') is TestingConfig
    assert get_config('unknown') is DevelopmentConfig

def test_tokens_last_a_day_outside_tests():
    assert DevelopmentConfig.JWT_ACCESS_TOKEN_EXPIRES == timedelta(hours=24)
    assert ProductionConfig.JWT_ACCESS_TOKEN_EXPIRES == timedelta(hours=24)

def test_attendance_defaults():
    assert ProductionConfig.DUPLICATE_SCAN_WINDOW == timedelta(minutes=5)
    assert ProductionConfig.HISTORY_LIMIT == 100
    assert ProductionConfig.IMPORT_MERGE_KEY in ('registration', 'qrcode')
