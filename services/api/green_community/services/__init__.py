"""Business logic services.

Services contain all business logic and are called by routes.
Services raise `ServiceError` subclasses; main.py renders them as the
standard error envelope.
"""
