"""
deployhook - GitHub push-to-deploy webhook receiver.
"""

__version__ = "1.0.0"
