"""
IP Pool Admission - validating admission webhook for load balancer IP pools.

This package guards IPPool custom resources before they are stored:
- Address ranges are well-formed and never overlap across pools
- Allocated addresses stay inside a pool's ranges on update
- Pool selectors stay unambiguous (priority, scope, single global pool)
"""

__version__ = "0.1.0"
