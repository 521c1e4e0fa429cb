"""
Mock integration clients.

These clients return fake (but realistic) CCB XML without calling any external API.
They are used when:
- CCB credentials are not available locally
- We want to test the proxy end-to-end without external dependencies

Important:
- Mock clients must follow the SAME interface as real HTTP clients.

Switching to real:
Set INTEGRATIONS_MODE=real (the default) and configure CCB_API_URL.
"""
