from __future__ import annotations
from typing import List, Optional
from kubernetes import config as k8s_config, client as k8s_client
from kubernetes.client.exceptions import ApiException
from kubernetes.config.config_exception import ConfigException
import urllib3, json, base64
from ..util import logging as log
urllib3.disable_warnings()


class KubeApiError(Exception):
    """A Kubernetes API call failed; ``str()`` is the API server's message."""
    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.status = status

class NotFoundError(KubeApiError):
    pass

def api_error_message(e: ApiException) -> str:
    body = getattr(e, 'body', None)
    if body:
        try:
            payload = json.loads(body)
        except (TypeError, ValueError):
            payload = None
        if isinstance(payload, dict) and payload.get('message'):
            return payload['message']
    return str(e.reason) if e.reason else f'API request failed with status {e.status}'

def to_kube_error(e: ApiException) -> KubeApiError:
    message = api_error_message(e)
    if e.status == 404:
        return NotFoundError(message, status=404)
    return KubeApiError(message, status=e.status)


def load_kubeconfig(kubeconfig: str | None = None, context: str | None = None):
    if kubeconfig: k8s_config.load_kube_config(config_file=kubeconfig, context=context)
    else: k8s_config.load_kube_config(context=context)

def configure_from_credentials(credentials) -> k8s_client.Configuration:
    cfg = k8s_client.Configuration()
    cfg.host = credentials.host
    if credentials.token:
        cfg.api_key = {"authorization": credentials.token}
        cfg.api_key_prefix = {"authorization": "Bearer"}
        log.debug('using bearer token', host=credentials.host)
    elif credentials.username and credentials.password:
        basic_auth = base64.b64encode(f"{credentials.username}:{credentials.password}".encode()).decode()
        cfg.api_key = {"authorization": f"Basic {basic_auth}"}
    if credentials.cert_file: cfg.cert_file = credentials.cert_file
    if credentials.key_file: cfg.key_file = credentials.key_file
    if credentials.ca_file: cfg.ssl_ca_cert = credentials.ca_file
    cfg.verify_ssl = credentials.verify_ssl
    if not credentials.verify_ssl: log.warn('ssl_verification_disabled', host=credentials.host)
    return cfg


class NamespaceClient:
    """Namespace and Deployment access used by the namespace commands.

    Every ``ApiException`` is re-raised as ``KubeApiError`` (``NotFoundError`` for 404s)
    carrying the server's status message, e.g. ``namespaces "demo" not found``.
    """

    def __init__(self, api_client: k8s_client.ApiClient | None = None):
        self.core_v1 = k8s_client.CoreV1Api(api_client)
        self.apps_v1 = k8s_client.AppsV1Api(api_client)

    def get_namespace(self, name: str) -> k8s_client.V1Namespace:
        log.debug('reading namespace', namespace=name)
        try:
            return self.core_v1.read_namespace(name)
        except ApiException as e:
            raise to_kube_error(e) from e

    def create_namespace(self, namespace: k8s_client.V1Namespace) -> k8s_client.V1Namespace:
        log.debug('creating namespace', namespace=namespace.metadata.name)
        try:
            return self.core_v1.create_namespace(body=namespace)
        except ApiException as e:
            raise to_kube_error(e) from e

    def update_namespace(self, namespace: k8s_client.V1Namespace) -> k8s_client.V1Namespace:
        log.debug('replacing namespace', namespace=namespace.metadata.name)
        try:
            return self.core_v1.replace_namespace(namespace.metadata.name, body=namespace)
        except ApiException as e:
            raise to_kube_error(e) from e

    def list_namespaces(self, label_selector: Optional[str] = None) -> List[k8s_client.V1Namespace]:
        log.debug('listing namespaces', label_selector=label_selector)
        kwargs = {'label_selector': label_selector} if label_selector else {}
        try:
            return list(self.core_v1.list_namespace(**kwargs).items)
        except ApiException as e:
            raise to_kube_error(e) from e

    def list_deployments(self, namespace: str, label_selector: Optional[str] = None) -> List[k8s_client.V1Deployment]:
        log.debug('listing deployments', namespace=namespace, label_selector=label_selector)
        kwargs = {'label_selector': label_selector} if label_selector else {}
        try:
            return list(self.apps_v1.list_namespaced_deployment(namespace, **kwargs).items)
        except ApiException as e:
            raise to_kube_error(e) from e


def build_namespace_client(cfg) -> NamespaceClient:
    """Create a client from an ``AppConfig``: explicit credentials, a kubeconfig, or in-cluster config."""
    if cfg.credentials:
        return NamespaceClient(k8s_client.ApiClient(configuration=configure_from_credentials(cfg.credentials)))
    if cfg.kubeconfig:
        load_kubeconfig(cfg.kubeconfig, cfg.context)
        return NamespaceClient(k8s_client.ApiClient())
    try:
        load_kubeconfig(context=cfg.context)
    except ConfigException:
        if cfg.context:
            raise
        log.debug('no kubeconfig found, using in-cluster config')
        k8s_config.load_incluster_config()
    return NamespaceClient(k8s_client.ApiClient())
