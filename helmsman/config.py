"""
YAML configuration files as a source of flag values.

Files registered with App.config_files() are read at every dispatch, "~"
expanded, missing files skipped, and deep-merged in order (later files win).
Top-level scalars and lists apply to every command; a nested mapping keyed by
a group or command name overrides them for that command:

    env: staging
    deploy:
      env: prod
    users:
      list:
        all: true

Config values sit below environment variables and explicit flags and do not
mark a flag as set.
"""
import logging
import os

import yaml

from .faults import ConfigError

log = logging.getLogger(__name__)


def merge(base, overlay, /):
    """deep-merge overlay into a copy of base; nested mappings merge recursively."""
    merged = dict(base)
    for key, value in overlay.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load(*paths):
    """read and merge the YAML mappings stored at paths."""
    settings = {}
    for path in paths:
        location = os.path.expanduser(os.fspath(path))
        if not os.path.isfile(location):
            log.debug("config file %s not found, skipped", location)
            continue
        try:
            with open(location, encoding="utf-8") as stream:
                data = yaml.safe_load(stream)
        except yaml.YAMLError as error:
            raise ConfigError(
                "malformed config file: %s" % location,
                hint="fix the YAML syntax or remove the file",
                details=(str(error),),
            ) from error
        except (OSError, UnicodeDecodeError) as error:
            raise ConfigError(
                "unreadable config file: %s" % location,
                hint="check the file permissions and that it is UTF-8 text",
                details=(str(error),),
            ) from error
        if data is None:
            continue
        if not isinstance(data, dict):
            raise ConfigError(
                "config file %s must contain a mapping, not %s" % (location, type(data).__name__),
                hint="write settings as 'flag-name: value' pairs",
            )
        log.debug("config file %s loaded (%d keys)", location, len(data))
        settings = merge(settings, data)
    return settings


def _scalars(mapping):
    return {str(key): value for key, value in mapping.items() if not isinstance(value, dict)}


def section(settings, /, *path):
    """
    the flat flag settings for the command reached through path.

    section(settings, "users", "list") layers settings["users"]["list"] over
    settings["users"] over the top level.
    """
    flat = _scalars(settings)
    current = settings
    for key in path:
        if not isinstance(current := current.get(key), dict):
            break
        flat |= _scalars(current)
    return flat


__all__ = (
    "merge",
    "load",
    "section",
)
