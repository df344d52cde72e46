"""
Bot client, configuration and database setup.
"""
