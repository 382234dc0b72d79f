"""
Constants used throughout the IP pool admission webhook.

This module defines all constant values used by the webhook including:
- Custom resource coordinates of the IPPool CRD
- Labels that change how a pool is validated
- Admission operation names
- Error message templates
"""

# IPPool custom resource coordinates (cluster scoped)
IPPOOL_GROUP = "loadbalancer.harvesterhci.io"
IPPOOL_VERSION = "v1beta1"
IPPOOL_PLURAL = "ippools"
IPPOOL_KIND = "IPPool"

# Label constants
# A pool labelled with GLOBAL_IP_POOL_LABEL=LABEL_VALUE_TRUE is the cluster-wide fallback
GLOBAL_IP_POOL_LABEL = "loadbalancer.harvesterhci.io/global-ip-pool"
LABEL_VALUE_TRUE = "true"

# Scope entries treat an empty value or this marker as "any"
SCOPE_WILDCARD = "*"

# Admission operations (as sent by the API server)
OPERATION_CREATE = "CREATE"
OPERATION_UPDATE = "UPDATE"
OPERATION_DELETE = "DELETE"
ADMISSION_OPERATIONS = [OPERATION_CREATE, OPERATION_UPDATE, OPERATION_DELETE]

# Verbs used when a rejection is reported back to the requester
OPERATION_VERBS = {
    OPERATION_CREATE: "create",
    OPERATION_UPDATE: "update",
    OPERATION_DELETE: "delete",
}

# Error message templates
ERROR_ADMISSION_CONTEXT = "could not {} IP pool {} because {}"
ERROR_EMPTY_RANGES = "range can't be empty"
ERROR_RANGE_SELF_OVERLAP = "there are overlaps between range {} and {}"
ERROR_RANGE_POOL_OVERLAP = "the ranges {} overlap with the ranges of pool {}"
ERROR_INVALID_ADDRESS = "invalid ip string {}"
ERROR_ALLOCATED_EXCLUDED = "allocated IP {} is excluded"
ERROR_INVALID_SELECTOR = "selector {} is invalid: {}"
ERROR_SCOPE_SELF_OVERLAP = "scope overlaps"
ERROR_SCOPE_POOL_OVERLAP = (
    "scope selector is same as the pool {} with priority 0 "
    "Project {} Namespace {} GuestCluster {}, set a different priority or scope"
)
ERROR_DUPLICATE_PRIORITY = "the priority can't be the same as the pool {}"
ERROR_DUPLICATE_GLOBAL_POOL = "there is already a global IP pool: {}"
ERROR_NON_EMPTY_POOL_DELETION = (
    "can't delete pool before releasing all the allocated IP"
)
ERROR_POOL_LIST_FAILED = "failed to list IP pools: {}"
