"""
Third-party (GitHub) login feature module.
"""
