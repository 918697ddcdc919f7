"""Root conftest — shared test configuration."""

import os

# Ensure tests don't accidentally use real credentials or a real data store
os.environ.setdefault("ANTHROPIC_API_KEY", "sk-ant-test-fake-key")
os.environ.setdefault("DATA_STORE_URL", "https://store.test")
os.environ.setdefault("DATA_STORE_SERVICE_KEY", "service-key")
os.environ.setdefault("ADMIN_KEY", "test-admin-key")
