"""Certificate review endpoints"""
