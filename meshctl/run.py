from __future__ import annotations
import click
from .config import load_config, validate_config, validate_mesh_label, AppConfig
from .kube.client import build_namespace_client
from .namespace.commands import (
    NamespaceAddCmd, NamespaceRemoveCmd, NamespaceListCmd, NamespaceCommandError, OUTPUT_FORMATS,
)
from .util import logging as log
from kubernetes.config.config_exception import ConfigException


def _mesh_name_option(ctx, param, value):
    if value is None:
        return None
    try:
        return validate_mesh_label(value)
    except ValueError as e:
        raise click.BadParameter(str(e))

def _load(ctx) -> AppConfig:
    obj = ctx.find_object(dict)
    if 'app_config' not in obj:
        try:
            cfg = load_config(obj.get('config'))
        except (FileNotFoundError, ValueError) as e:
            raise click.ClickException(str(e))
        if obj.get('kubeconfig'):
            cfg.kubeconfig = obj['kubeconfig']
            cfg.credentials = None
        if obj.get('context'):
            cfg.context = obj['context']
        try:
            validate_config(cfg)
        except ValueError as e:
            raise click.ClickException(str(e))
        log.configure_logging(cfg.logging.level, cfg.logging.format)
        obj['app_config'] = cfg
    return obj['app_config']

def _client(cfg: AppConfig):
    try:
        return build_namespace_client(cfg)
    except ConfigException as e:
        raise click.ClickException(f'Could not load Kubernetes configuration: {e}')

def _run(cmd):
    try:
        cmd.run()
    except NamespaceCommandError as e:
        raise click.ClickException(str(e))


@click.group(add_help_option=False)
@click.option('--config', default=None, help='Config file path (YAML)')
@click.option('--kubeconfig', default=None, help='Kubeconfig file; overrides the config file')
@click.option('--context', default=None, help='Kubeconfig context to use')
@click.pass_context
def cli(ctx, config, kubeconfig, context):
    """Manage the namespaces that belong to a service mesh."""
    ctx.ensure_object(dict)
    ctx.obj['config'] = config
    ctx.obj['kubeconfig'] = kubeconfig
    ctx.obj['context'] = context

@cli.group(add_help_option=False)
def namespace():
    """Add, remove and list mesh namespaces."""

@namespace.command(add_help_option=False)
@click.argument('namespaces', nargs=-1, required=True)
@click.option('--mesh-name', default=None, callback=_mesh_name_option, help='Mesh to add the namespaces to (default from config)')
@click.option('--enable-sidecar-injection', is_flag=True, help='Enable automatic sidecar injection')
@click.pass_context
def add(ctx, namespaces, mesh_name, enable_sidecar_injection):
    """Add one or more namespaces to a mesh."""
    cfg = _load(ctx)
    cmd = NamespaceAddCmd(_client(cfg), mesh_name or cfg.mesh_name, list(namespaces), enable_sidecar_injection)
    _run(cmd)

@namespace.command(add_help_option=False)
@click.argument('namespace_name', metavar='NAMESPACE')
@click.option('--mesh-name', default=None, callback=_mesh_name_option, help='Mesh the namespace belongs to (default from config)')
@click.pass_context
def remove(ctx, namespace_name, mesh_name):
    """Remove a namespace from a mesh."""
    cfg = _load(ctx)
    _run(NamespaceRemoveCmd(_client(cfg), mesh_name or cfg.mesh_name, namespace_name))

@namespace.command('list', add_help_option=False)
@click.option('--mesh-name', default=None, callback=_mesh_name_option, help='Only list namespaces of this mesh')
@click.option('--output', '-o', type=click.Choice(OUTPUT_FORMATS), default='table', help='Output format')
@click.pass_context
def list_cmd(ctx, mesh_name, output):
    """List namespaces enlisted in a mesh, or in any mesh."""
    cfg = _load(ctx)
    _run(NamespaceListCmd(_client(cfg), mesh_name, output))

@cli.command('help', add_help_option=False)
@click.argument('command', nargs=-1)
@click.pass_context
def help_cmd(ctx, command):
    """Show help for a command, or list all commands."""
    group = ctx.parent.command if ctx.parent else ctx.command
    if not command:
        click.echo("Available commands:")
        for cmd_name in group.commands:
            click.echo(f"  {cmd_name}")
        click.echo("\nRun 'meshctl help <command> [<subcommand>]' for details.")
        return
    cmd = group
    for name in command:
        cmd = cmd.commands.get(name) if isinstance(cmd, click.Group) else None
        if cmd is None:
            click.echo(f"Unknown command: {' '.join(command)}")
            click.echo("Run 'meshctl help' to list available commands.")
            return
    with click.Context(cmd, info_name=' '.join(command)) as cmd_ctx:
        click.echo(cmd.get_help(cmd_ctx))

if __name__ == '__main__':
    cli()
