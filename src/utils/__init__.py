"""Shared utilities for the Genkit Google Cloud plugins."""
