"""
Shaft Miner - dig, refine, and automate a vertical mine.
"""
__version__ = "0.1.0"
