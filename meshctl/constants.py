from __future__ import annotations

DEFAULT_MESH_NAME = 'osm'

# Label on a Namespace recording the mesh it belongs to
MONITOR_LABEL = 'openservicemesh.io/monitored-by'
SIDECAR_INJECTION_ANNOTATION = 'openservicemesh.io/sidecar-injection'
SIDECAR_INJECTION_ENABLED = 'enabled'

CONTROLLER_NAME = 'osm-controller'
CONTROLLER_APP_LABEL = 'app'
