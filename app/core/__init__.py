"""Configuration, logging, persistence and metrics"""
