"""Data access layer for the trading platform.

This module provides data models and repository patterns for persisting
transactions and holdings to various backends (CSV files, memory).
"""
