"""
Thin pygame adapters over the gameplay core.
"""
