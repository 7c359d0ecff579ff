"""
HTTP surface for the drayage engine.
"""
