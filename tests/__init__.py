"""
Tests package - Test suite for the IP pool admission webhook.

Contains:
- unit/: Unit tests for individual components
- fixtures/: Test data and resource builders
"""
