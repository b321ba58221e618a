"""Tests for the courses app."""
