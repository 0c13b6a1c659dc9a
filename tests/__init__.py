"""Tests for mcpshield."""
