"""Adapters implementing domain ports (persistence, system status)"""
