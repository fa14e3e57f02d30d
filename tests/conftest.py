"""Test configuration: in-memory SQLite and a fixed API key, set before any ledger import."""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "development"
os.environ["API_KEY_USER1"] = "test-key-user1"
os.environ["API_KEY_USER2"] = "test-key-user2"
