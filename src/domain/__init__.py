"""
Domain layer for the welcome-email service.

This layer contains:
- Data models (type-safe structures)
- Error taxonomy and transport error classification
- Response envelopes (uniform success/failure shape)
- The welcome-email pipeline
"""
