"""
Discovery Tracker command-line client.
"""
