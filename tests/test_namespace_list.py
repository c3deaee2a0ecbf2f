import json
from io import StringIO

import pytest

from meshctl.constants import MONITOR_LABEL
from meshctl.namespace.commands import NamespaceListCmd, NamespaceCommandError, render_table


def _cmd(client, mesh=None, output='table'):
    out = StringIO()
    return NamespaceListCmd(client, mesh, output=output, out=out), out


def test_select_only_enlisted_namespaces(fake_client):
    fake_client.add_namespace('enlisted1', 'mesh1')
    fake_client.add_namespace('enlisted2', 'mesh2')
    fake_client.add_namespace('not-enlisted')
    cmd, _ = _cmd(fake_client)
    selected = {ns.metadata.name: ns.metadata.labels[MONITOR_LABEL] for ns in cmd.select_namespaces()}
    assert selected == {'enlisted1': 'mesh1', 'enlisted2': 'mesh2'}


def test_select_namespaces_of_requested_mesh(fake_client):
    fake_client.add_namespace('enlisted1', 'mesh1')
    fake_client.add_namespace('enlisted2', 'mesh2')
    cmd, _ = _cmd(fake_client, mesh='mesh2')
    selected = {ns.metadata.name: ns.metadata.labels[MONITOR_LABEL] for ns in cmd.select_namespaces()}
    assert selected == {'enlisted2': 'mesh2'}


def test_select_empty_for_unknown_mesh(fake_client):
    fake_client.add_namespace('enlisted1', 'mesh1')
    fake_client.add_namespace('enlisted2', 'mesh2')
    cmd, _ = _cmd(fake_client, mesh='someothermesh')
    assert cmd.select_namespaces() == []


def test_no_namespaces_in_requested_mesh_message(fake_client):
    fake_client.add_namespace('enlisted1', 'mesh1')
    fake_client.add_namespace('enlisted2', 'mesh2')
    cmd, out = _cmd(fake_client, mesh='someothermesh')
    cmd.run()
    assert out.getvalue() == 'No namespaces in mesh [someothermesh]\n'


def test_no_namespaces_enlisted_message(fake_client):
    fake_client.add_namespace('not-enlisted')
    cmd, out = _cmd(fake_client)
    cmd.run()
    assert out.getvalue() == 'No namespaces in any mesh\n'


def test_no_namespaces_at_all_message(fake_client):
    cmd, out = _cmd(fake_client)
    cmd.run()
    assert out.getvalue() == 'No namespaces in any mesh\n'


def test_table_output_sorted_by_namespace(fake_client):
    fake_client.add_namespace('zeta', 'mesh1', sidecar_injection=True)
    fake_client.add_namespace('alpha', 'mesh2')
    cmd, out = _cmd(fake_client)
    cmd.run()
    lines = out.getvalue().splitlines()
    assert lines[0].split() == ['NAMESPACE', 'MESH', 'SIDECAR-INJECTION']
    assert lines[1].split() == ['alpha', 'mesh2', '-']
    assert lines[2].split() == ['zeta', 'mesh1', 'enabled']


def test_render_table_aligns_columns():
    table = render_table([
        {'namespace': 'a-very-long-namespace', 'mesh': 'm', 'sidecar_injection': False},
        {'namespace': 'b', 'mesh': 'm', 'sidecar_injection': True},
    ])
    header, first, second = table.splitlines()
    col = header.index('MESH')
    assert col == len('a-very-long-namespace') + 2
    assert first[col] == 'm' and second[col] == 'm'


def test_json_output(fake_client):
    fake_client.add_namespace('bookstore', 'osm', sidecar_injection=True)
    fake_client.add_namespace('bookbuyer', 'osm')
    cmd, out = _cmd(fake_client, mesh='osm', output='json')
    cmd.run()
    assert json.loads(out.getvalue()) == [
        {'namespace': 'bookbuyer', 'mesh': 'osm', 'sidecar_injection': False},
        {'namespace': 'bookstore', 'mesh': 'osm', 'sidecar_injection': True},
    ]


def test_unsupported_output_format(fake_client):
    cmd, _ = _cmd(fake_client, output='yaml')
    with pytest.raises(NamespaceCommandError):
        cmd.run()
