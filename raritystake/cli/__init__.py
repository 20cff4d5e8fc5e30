"""
RarityStaking command-line interface.
"""
