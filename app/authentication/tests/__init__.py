"""Tests for the authentication app."""
