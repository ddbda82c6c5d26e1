"""
Test suite for the Clinic Appointment Service.

Contains service-level and HTTP API tests.
"""
import os

# Set environment for testing
os.environ["TESTING"] = "1"
