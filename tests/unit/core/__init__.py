"""Tests for convoflow.core."""
