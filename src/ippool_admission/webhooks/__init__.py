"""
Admission webhooks for IP pools.

This module provides the validating admission webhook for IPPool custom
resources. The webhook rejects pools that would overlap, orphan allocated
addresses or make pool selection ambiguous, before they are stored.

Webhooks are served by Kopf's built-in HTTPS server.
"""
