"""
Real HTTP integration clients.

These clients communicate with the real CCB api.php endpoint over HTTP.

Important:
- Must implement the same interface as the mock clients (build_url, send, aclose)
- Must return UpstreamResponse (see integrations/contracts), never parsed data

Switching:
The selection of mock vs real clients should happen in ccb_proxy/api/main.py only.
"""
