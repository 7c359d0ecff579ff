"""
Drayage order lifecycle, tiered charge calculation and terminal
appointment scheduling engine.
"""
