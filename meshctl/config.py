from __future__ import annotations
import os
import re
import yaml
from dataclasses import dataclass, field
from typing import Optional
from .constants import DEFAULT_MESH_NAME
from .util.logging import FORMATS

MESH_NAME_RE = re.compile(r'^[a-z0-9]([-a-z0-9]*[a-z0-9])?$')
MESH_NAME_MAX_LEN = 63
# Kubernetes label-value grammar
LABEL_VALUE_RE = re.compile(r'^[A-Za-z0-9]([-A-Za-z0-9_.]*[A-Za-z0-9])?$')

@dataclass
class ClusterCredentials:
    host: str
    token: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    cert_file: Optional[str] = None
    key_file: Optional[str] = None
    ca_file: Optional[str] = None
    verify_ssl: bool = True

@dataclass
class LoggingConfig:
    level: str = 'INFO'
    format: str = 'text'

@dataclass
class AppConfig:
    kubeconfig: Optional[str] = None
    context: Optional[str] = None
    credentials: Optional[ClusterCredentials] = None
    mesh_name: str = DEFAULT_MESH_NAME
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def validate_mesh_name(name: str) -> str:
    """Return ``name`` if it is usable as a mesh name (a DNS-1123 label), else raise ValueError."""
    if not name or len(name) > MESH_NAME_MAX_LEN or not MESH_NAME_RE.match(name):
        raise ValueError(
            f'Invalid mesh name [{name}]: must be at most {MESH_NAME_MAX_LEN} characters of lowercase '
            'alphanumerics or "-", starting and ending with an alphanumeric'
        )
    return name

def validate_mesh_label(name: str) -> str:
    """Return ``name`` if it can be matched against the monitor label, else raise ValueError."""
    if not name or len(name) > MESH_NAME_MAX_LEN or not LABEL_VALUE_RE.match(name):
        raise ValueError(
            f'Invalid mesh name [{name}]: must be at most {MESH_NAME_MAX_LEN} characters of alphanumerics, '
            '"-", "_" or ".", starting and ending with an alphanumeric'
        )
    return name

def _parse_credentials(creds_data) -> Optional[ClusterCredentials]:
    if not creds_data:
        return None
    return ClusterCredentials(
        host=creds_data.get('host'),
        token=creds_data.get('token'),
        username=creds_data.get('username'),
        password=creds_data.get('password'),
        cert_file=creds_data.get('cert_file'),
        key_file=creds_data.get('key_file'),
        ca_file=creds_data.get('ca_file'),
        verify_ssl=creds_data.get('verify_ssl', True)
    )

def validate_config(cfg: AppConfig) -> AppConfig:
    if cfg.kubeconfig and cfg.credentials:
        raise ValueError('Config cannot specify both kubeconfig and credentials')
    if cfg.credentials and not cfg.credentials.host:
        raise ValueError('Config credentials must include host')
    if cfg.context and cfg.credentials:
        raise ValueError('Config context can only be used with a kubeconfig')
    if cfg.logging.format not in FORMATS:
        raise ValueError(f'Unsupported logging format {cfg.logging.format}; expected one of {", ".join(FORMATS)}')
    validate_mesh_name(cfg.mesh_name)
    return cfg

def load_config(path: str | None = None) -> AppConfig:
    """Load the YAML config at ``path``; with no path, return the defaults."""
    if path is None:
        return AppConfig()
    if not os.path.exists(path):
        raise FileNotFoundError(f'Config file not found: {path}')
    with open(path, 'r', encoding='utf-8') as f:
        raw = yaml.safe_load(f) or {}
    kubeconfig = raw.get('kubeconfig')
    if kubeconfig:
        kubeconfig = os.path.expanduser(kubeconfig)
    logging_raw = raw.get('logging', {}) or {}
    logging_cfg = LoggingConfig(
        level=str(logging_raw.get('level', 'INFO')).upper(),
        format=str(logging_raw.get('format', 'text')).lower()
    )
    cfg = AppConfig(
        kubeconfig=kubeconfig,
        context=raw.get('context'),
        credentials=_parse_credentials(raw.get('credentials')),
        mesh_name=raw.get('mesh_name', DEFAULT_MESH_NAME),
        logging=logging_cfg
    )
    return validate_config(cfg)
