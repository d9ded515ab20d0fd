"""
Form Relay: authenticated webhook to form submission relay.
"""
