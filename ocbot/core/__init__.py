"""
OC Watch Bot - Core Package
===========================

Logger, configuration and shared constants.
"""
