"""
OC Watch Bot - Services Package
===============================

Store, Torn API client, OC update cycle and its scheduler.
"""
