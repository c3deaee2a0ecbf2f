from __future__ import annotations
import json
import sys
from typing import Any, IO, List, Optional
import click
from ..constants import (
    CONTROLLER_APP_LABEL, CONTROLLER_NAME, MONITOR_LABEL,
    SIDECAR_INJECTION_ANNOTATION, SIDECAR_INJECTION_ENABLED,
)
from ..kube.client import KubeApiError
from ..util import logging as log

OUTPUT_FORMATS = ('table', 'json')


class NamespaceCommandError(Exception):
    """Terminal failure of a namespace command; the message is shown to the user as-is."""


def _labels(ns) -> dict:
    return ns.metadata.labels or {}

def _annotations(ns) -> dict:
    return ns.metadata.annotations or {}


class NamespaceAddCmd:
    """Label each namespace with the mesh name, in order, stopping at the first failure.

    Namespaces already running a mesh controller are reported and skipped.
    """

    def __init__(self, client, mesh_name: str, namespaces: List[str], enable_sidecar_injection: bool = False, out: Optional[IO[str]] = None):
        self.client = client
        self.mesh_name = mesh_name
        self.namespaces = list(namespaces)
        self.enable_sidecar_injection = enable_sidecar_injection
        self.out = out if out is not None else sys.stdout

    def _fail(self, namespace: str, err: Exception) -> NamespaceCommandError:
        return NamespaceCommandError(f'Could not add namespace [{namespace}] to mesh [{self.mesh_name}]: {err}')

    def _has_controller(self, namespace: str) -> bool:
        selector = f'{CONTROLLER_APP_LABEL}={CONTROLLER_NAME}'
        return len(self.client.list_deployments(namespace, label_selector=selector)) > 0

    def run(self):
        for name in self.namespaces:
            try:
                ns = self.client.get_namespace(name)
                if self._has_controller(name):
                    log.warn('namespace hosts a mesh controller, skipping', namespace=name, mesh=self.mesh_name)
                    click.echo(f'Namespace [{name}] already has [{CONTROLLER_NAME}] installed and cannot be added to mesh [{self.mesh_name}]', file=self.out)
                    continue
                labels = dict(_labels(ns))
                current = labels.get(MONITOR_LABEL)
                if current and current != self.mesh_name:
                    log.warn('moving namespace between meshes', namespace=name, previous_mesh=current, mesh=self.mesh_name)
                labels[MONITOR_LABEL] = self.mesh_name
                ns.metadata.labels = labels
                if self.enable_sidecar_injection:
                    annotations = dict(_annotations(ns))
                    annotations[SIDECAR_INJECTION_ANNOTATION] = SIDECAR_INJECTION_ENABLED
                    ns.metadata.annotations = annotations
                self.client.update_namespace(ns)
            except KubeApiError as e:
                raise self._fail(name, e) from e
            log.info('namespace added to mesh', namespace=name, mesh=self.mesh_name, sidecar_injection=self.enable_sidecar_injection)
            click.echo(f'Namespace [{name}] successfully added to mesh [{self.mesh_name}]', file=self.out)


class NamespaceRemoveCmd:
    def __init__(self, client, mesh_name: str, namespace: str, out: Optional[IO[str]] = None):
        self.client = client
        self.mesh_name = mesh_name
        self.namespace = namespace
        self.out = out if out is not None else sys.stdout

    def run(self):
        try:
            ns = self.client.get_namespace(self.namespace)
        except KubeApiError as e:
            raise NamespaceCommandError(f'Could not get namespace [{self.namespace}]: {e}') from e
        labels = dict(_labels(ns))
        current = labels.get(MONITOR_LABEL)
        if current is None:
            click.echo(f'Namespace [{self.namespace}] already does not belong to any mesh', file=self.out)
            return
        if current != self.mesh_name:
            raise NamespaceCommandError(f'Namespace belongs to mesh [{current}], not mesh [{self.mesh_name}]. Please specify the correct mesh')
        del labels[MONITOR_LABEL]
        ns.metadata.labels = labels
        annotations = dict(_annotations(ns))
        if SIDECAR_INJECTION_ANNOTATION in annotations:
            del annotations[SIDECAR_INJECTION_ANNOTATION]
            ns.metadata.annotations = annotations
        try:
            self.client.update_namespace(ns)
        except KubeApiError as e:
            raise NamespaceCommandError(f'Could not remove label from namespace [{self.namespace}]: {e}') from e
        log.info('namespace removed from mesh', namespace=self.namespace, mesh=self.mesh_name)
        click.echo(f'Namespace [{self.namespace}] successfully removed from mesh [{self.mesh_name}]', file=self.out)


def namespace_row(ns) -> dict:
    return {
        'namespace': ns.metadata.name,
        'mesh': _labels(ns).get(MONITOR_LABEL, ''),
        'sidecar_injection': _annotations(ns).get(SIDECAR_INJECTION_ANNOTATION) == SIDECAR_INJECTION_ENABLED,
    }

def render_table(rows: List[dict]) -> str:
    headers = ['NAMESPACE', 'MESH', 'SIDECAR-INJECTION']
    cells = [[r['namespace'], r['mesh'], SIDECAR_INJECTION_ENABLED if r['sidecar_injection'] else '-'] for r in rows]
    widths = [max([len(h)] + [len(c[i]) for c in cells]) + 2 for i, h in enumerate(headers)]
    lines = []
    for line in [headers] + cells:
        lines.append(''.join(f'{cell:{w}}' for cell, w in zip(line, widths)).rstrip())
    return '\n'.join(lines)


class NamespaceListCmd:
    def __init__(self, client, mesh_name: Optional[str] = None, output: str = 'table', out: Optional[IO[str]] = None):
        self.client = client
        self.mesh_name = mesh_name
        self.output = output
        self.out = out if out is not None else sys.stdout

    def select_namespaces(self) -> List[Any]:
        """Namespaces carrying the monitor label, restricted to ``mesh_name`` when set."""
        selector = f'{MONITOR_LABEL}={self.mesh_name}' if self.mesh_name else MONITOR_LABEL
        try:
            return self.client.list_namespaces(label_selector=selector)
        except KubeApiError as e:
            raise NamespaceCommandError(f'Could not list namespaces: {e}') from e

    def run(self):
        if self.output not in OUTPUT_FORMATS:
            raise NamespaceCommandError(f'Unsupported output format {self.output}; expected one of {", ".join(OUTPUT_FORMATS)}')
        namespaces = self.select_namespaces()
        if not namespaces:
            if self.mesh_name:
                click.echo(f'No namespaces in mesh [{self.mesh_name}]', file=self.out)
            else:
                click.echo('No namespaces in any mesh', file=self.out)
            return
        rows = sorted((namespace_row(ns) for ns in namespaces), key=lambda r: r['namespace'])
        if self.output == 'json':
            click.echo(json.dumps(rows, indent=2), file=self.out)
        else:
            click.echo(render_table(rows), file=self.out)
