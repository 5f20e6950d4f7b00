"""Trainer lab access portal backend."""
