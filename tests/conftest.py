import sys, os
import copy

import pytest

# Ensure project root (parent of tests directory) is on sys.path for imports when
# test execution occurs in environments that don't automatically include it.
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from kubernetes import client as k8s_client
from meshctl.constants import MONITOR_LABEL, SIDECAR_INJECTION_ANNOTATION, CONTROLLER_NAME
from meshctl.kube.client import KubeApiError, NotFoundError
from meshctl.util import logging as log


def _matches(labels, selector):
    if not selector:
        return True
    labels = labels or {}
    for term in selector.split(','):
        if '=' in term:
            key, value = term.split('=', 1)
            if labels.get(key) != value:
                return False
        elif term not in labels:
            return False
    return True


class FakeNamespaceClient:
    """In-memory stand-in for NamespaceClient."""

    def __init__(self):
        self.namespaces = {}
        self.deployments = {}
        self.updates = []

    def get_namespace(self, name):
        if name not in self.namespaces:
            raise NotFoundError(f'namespaces "{name}" not found', status=404)
        return copy.deepcopy(self.namespaces[name])

    def create_namespace(self, namespace):
        name = namespace.metadata.name
        if name in self.namespaces:
            raise KubeApiError(f'namespaces "{name}" already exists', status=409)
        self.namespaces[name] = copy.deepcopy(namespace)
        return copy.deepcopy(namespace)

    def update_namespace(self, namespace):
        name = namespace.metadata.name
        if name not in self.namespaces:
            raise NotFoundError(f'namespaces "{name}" not found', status=404)
        self.namespaces[name] = copy.deepcopy(namespace)
        self.updates.append(name)
        return copy.deepcopy(namespace)

    def list_namespaces(self, label_selector=None):
        return [copy.deepcopy(ns) for ns in self.namespaces.values() if _matches(ns.metadata.labels, label_selector)]

    def list_deployments(self, namespace, label_selector=None):
        return [copy.deepcopy(d) for d in self.deployments.get(namespace, []) if _matches(d.metadata.labels, label_selector)]

    # test helpers
    def add_namespace(self, name, mesh='', sidecar_injection=False):
        labels = {MONITOR_LABEL: mesh} if mesh else {}
        annotations = {SIDECAR_INJECTION_ANNOTATION: 'enabled'} if sidecar_injection else None
        ns = k8s_client.V1Namespace(metadata=k8s_client.V1ObjectMeta(name=name, labels=labels, annotations=annotations))
        return self.create_namespace(ns)

    def add_controller(self, namespace, mesh='osm'):
        labels = {'app': CONTROLLER_NAME, 'meshName': mesh}
        dep = k8s_client.V1Deployment(
            metadata=k8s_client.V1ObjectMeta(name=CONTROLLER_NAME, namespace=namespace, labels=labels),
            spec=k8s_client.V1DeploymentSpec(
                selector=k8s_client.V1LabelSelector(match_labels={'app': CONTROLLER_NAME}),
                template=k8s_client.V1PodTemplateSpec(metadata=k8s_client.V1ObjectMeta(labels=labels)),
            ),
        )
        self.deployments.setdefault(namespace, []).append(dep)
        return dep


@pytest.fixture
def fake_client():
    return FakeNamespaceClient()


@pytest.fixture(autouse=True)
def quiet_logging():
    log.configure_logging('ERROR', 'text')
    yield
    log.configure_logging('INFO', 'text')
