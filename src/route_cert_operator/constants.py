"""Constants for the Route Certificate Operator."""

# Operator identity
CONTROLLER_NAME = "route-cert-operator"
FIELD_MANAGER = "route-cert-operator"

# Route (OpenShift)
ROUTE_GROUP = "route.openshift.io"
ROUTE_VERSION = "v1"
ROUTE_PLURAL = "routes"
KIND_ROUTE = "Route"

# Certificate (cert-manager)
CERT_MANAGER_GROUP = "cert-manager.io"
CERT_MANAGER_VERSION = "v1"
CERTIFICATE_PLURAL = "certificates"
KIND_CERTIFICATE = "Certificate"

KIND_SECRET = "Secret"

# Defaults for OperatorConfig
DEFAULT_CERT_MANAGER_NAMESPACE = "cert-manager"
ISSUER_ANNOTATION_KEY = f"{CERT_MANAGER_GROUP}/cluster-issuer"
CERT_ANNOTATION_KEY = f"{CERT_MANAGER_GROUP}/routes"
ROUTE_UPDATE_ANNOTATION_KEY = f"{CERT_MANAGER_GROUP}/routes-tls-updated"
ROUTE_RECHECK_ANNOTATION_KEY = f"{CERT_MANAGER_GROUP}/routes-recheck-requested"
FINALIZER = f"{CERT_MANAGER_GROUP}/route-finalizer"
DEFAULT_ISSUER_KIND = "ClusterIssuer"
DEFAULT_PRIVATE_KEY_ALGORITHM = "ECDSA"
DEFAULT_PRIVATE_KEY_SIZE = 256

# Requeue intervals (seconds)
REQUEUE_DEFAULT_INTERVAL = 3600
REQUEUE_ERROR_INTERVAL = 5

# Attempts at requesting a re-check of a Route after a failed Certificate-triggered reconcile
RECHECK_ATTEMPTS = 3

# Naming suffixes
CERTIFICATE_NAME_SUFFIX = "-cert"
SECRET_NAME_SUFFIX = "-tls"

# Signed material keys
TLS_CRT = "tls.crt"
TLS_KEY = "tls.key"
CA_CRT = "ca.crt"

# Route TLS defaults
DEFAULT_TLS_TERMINATION = "edge"
DEFAULT_INSECURE_EDGE_POLICY = "Redirect"

# Reference codec
REFERENCE_DELIMITER = ","
IDENTITY_SEPARATOR = "/"
UPDATE_TRAIL_DELIMITER = ","

# Event actions
EVENT_ACTION_CREATE = "Create"
EVENT_ACTION_PATCH = "Patch"

# Event reasons
EVENT_REASON_ROUTE_DELETION = "RouteDeletion"
EVENT_REASON_UNMANAGE_ROUTE = "UnmanageRoute"
EVENT_REASON_MISSING_CERTIFICATE = "MissingCertificate"
EVENT_REASON_INVALID_ROUTE_TLS = "InvalidRouteTLS"
EVENT_REASON_MISSING_ROUTE_FINALIZER = "MissingRouteFinalizer"
EVENT_REASON_MISSING_ROUTE_IN_ANNOTATION = "MissingRouteInCertificateAnnotation"
