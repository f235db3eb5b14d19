"""
                Food Ordering API

Food ordering backend whose request-security pipeline (tokens, roles,
validation, sanitization, rate limiting, security headers) gates every
mutating and sensitive read operation before it reaches the data store.

Version: 1.0.0
License: MIT
"""

__version__ = "1.0.0"
