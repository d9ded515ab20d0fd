"""
Infrastructure layer for Form Relay.
Clients for the external systems the relay talks to.
"""

from .external_apis import FormSubmissionClient

__all__ = ["FormSubmissionClient"]
