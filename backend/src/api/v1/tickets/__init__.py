"""Support ticket endpoints"""
