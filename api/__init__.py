"""
Serverless entry points.
"""
