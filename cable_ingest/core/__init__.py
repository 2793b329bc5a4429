"""Core utilities and shared infrastructure.

- config: Configuration loading and validation
- constants: Soil types, depths, keyword sets, upload limits
- exceptions: Custom exception hierarchy
- ingress: Upload validation and file adapters
"""
