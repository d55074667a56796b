"""Slash-command dispatch framework for Discord bots."""
