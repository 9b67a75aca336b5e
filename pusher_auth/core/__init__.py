"""
Core signing, authorization, webhook and encryption components.
"""
