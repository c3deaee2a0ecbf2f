from __future__ import annotations
import json, sys, time
from typing import Any

LEVELS = {'DEBUG': 0, 'INFO': 1, 'WARN': 2, 'ERROR': 3}
FORMATS = ('text', 'json')
_settings = {'level': 'INFO', 'format': 'text'}

def configure_logging(level: str = 'INFO', format: str = 'text'):
    lvl = level.upper()
    if lvl == 'WARNING':
        lvl = 'WARN'
    _settings['level'] = lvl if lvl in LEVELS else 'INFO'
    _settings['format'] = format.lower()

def enabled(level: str) -> bool:
    return LEVELS.get(level.upper(), 1) >= LEVELS.get(_settings['level'], 1)

def _render(ts: str, lvl: str, message: str, fields: dict) -> str:
    if _settings['format'] == 'json':
        return json.dumps({'ts': ts, 'level': lvl, 'msg': message, **fields}, sort_keys=True, default=str)
    pairs = ' '.join(f'{k}={v}' for k, v in fields.items())
    return f"{ts} [{lvl}] {message}" + (f" {pairs}" if pairs else '')

def log(level: str, message: str, **fields: Any):
    """Write one record to stderr when ``level`` passes the configured threshold."""
    if not enabled(level):
        return
    ts = time.strftime('%Y-%m-%dT%H:%M:%SZ', time.gmtime())
    print(_render(ts, level.upper(), message, fields), file=sys.stderr)

def debug(message: str, **fields: Any): log('debug', message, **fields)

def info(message: str, **fields: Any): log('info', message, **fields)

def warn(message: str, **fields: Any): log('warn', message, **fields)

def error(message: str, **fields: Any): log('error', message, **fields)
