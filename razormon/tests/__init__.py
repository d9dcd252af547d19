"""Test suite for the razor trigger monitor."""
