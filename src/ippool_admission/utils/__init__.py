"""
Utilities package - Kubernetes integration helpers.

Contains:
- kubernetes: API client setup and the cluster-backed IPPool repository
"""
