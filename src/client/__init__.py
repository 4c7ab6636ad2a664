"""Async client for the admin console HTTP API."""
