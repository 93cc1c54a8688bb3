"""
Pytest configuration for EarthLord client tests
"""

import os

# Selects the testing section of the logging config
os.environ.setdefault("ENVIRONMENT", "testing")

# Configure pytest-asyncio mode for version 1.x
pytest_plugins = ('pytest_asyncio',)


def pytest_configure(config):
    config.addinivalue_line(
        "markers", "asyncio: mark test as an asyncio test."
    )
