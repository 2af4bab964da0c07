"""
AWS CDK environment installer, validator and helpers.
"""

__version__ = "0.1.0"
