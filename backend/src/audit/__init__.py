"""Audit module: recorder service and read-only query API"""
