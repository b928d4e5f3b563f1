"""
Core components and utilities for skill_ninja.
"""
