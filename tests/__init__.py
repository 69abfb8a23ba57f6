"""
Test suite for the Hospital Appointment Booking API.

Contains unit and integration tests for the application's functionality.
"""
import os

# Set environment for testing before the app is imported
os.environ["TESTING"] = "1"
os.environ["TEST_DATABASE_URL"] = "sqlite:///./test.db"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["SEED_DEFAULT_USERS"] = "false"
