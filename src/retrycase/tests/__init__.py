"""Tests for retrycase."""
