"""Constants for the RADOS Gateway Operator."""

# API Group
API_GROUP = "radosgw.cloud37.dev"
API_VERSION = "v1alpha1"
API_GROUP_VERSION = f"{API_GROUP}/{API_VERSION}"

# Resource Kinds
KIND_PROVIDER = "Provider"
KIND_USER = "User"
KIND_SUBUSER = "Subuser"
KIND_KEY = "Key"

# Plurals
PLURAL_PROVIDERS = "providers"

# Labels
LABEL_MANAGED_BY = f"{API_GROUP}/managed-by"
LABEL_RESOURCE_TYPE = f"{API_GROUP}/resource-type"

# Finalizers
FINALIZER = f"{API_GROUP}/finalizer"

# Field Manager
FIELD_MANAGER = "radosgw-operator"

# Secret keys for captured key credentials
SECRET_KEY_ACCESS_KEY_ID = "access-key-id"
SECRET_KEY_SECRET_ACCESS_KEY = "secret-access-key"

# Condition Types
COND_READY = "Ready"
COND_PROVIDER_NOT_READY = "ProviderNotReady"
COND_AUTH_VALID = "AuthValid"
COND_ENDPOINT_REACHABLE = "EndpointReachable"
COND_CREATION_FAILED = "CreationFailed"

# Event Reasons
EVENT_REASON_RECONCILE_STARTED = "ReconcileStarted"
EVENT_REASON_RECONCILE_FAILED = "ReconcileFailed"
EVENT_REASON_VALIDATE_SUCCEEDED = "ValidateSucceeded"
EVENT_REASON_VALIDATE_FAILED = "ValidateFailed"
EVENT_REASON_USER_CREATED = "UserCreated"
EVENT_REASON_USER_UPDATED = "UserUpdated"
EVENT_REASON_SUBUSER_CREATED = "SubuserCreated"
EVENT_REASON_SUBUSER_UPDATED = "SubuserUpdated"
EVENT_REASON_SUBUSER_DELETED = "SubuserDeleted"
EVENT_REASON_KEY_CREATED = "KeyCreated"
EVENT_REASON_KEY_DELETED = "KeyDeleted"
EVENT_REASON_DRIFT_DETECTED = "DriftDetected"

# Admin API
ADMIN_PREFIX = "/admin"
KEY_TYPE_S3 = "s3"
DEFAULT_REQUEST_TIMEOUT_SECONDS = 30.0
