"""Test fixtures: entity builders and in-memory port implementations"""
