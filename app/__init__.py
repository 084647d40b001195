"""Agent dashboard backend"""
