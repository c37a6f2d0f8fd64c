"""Services used by the bot and the login API.

Telegram login verification, token issuance, the per-user session queue and
the ports of the external tracking service.
"""
