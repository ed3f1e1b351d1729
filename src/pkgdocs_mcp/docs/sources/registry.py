"""npm registry configuration from ``.npmrc`` files.

Settings are read from the home ``.npmrc`` first, then from every ``.npmrc``
between the filesystem root and the project directory, so values closer to
the project override home values. Supported keys:

- ``registry=<url>``                default registry
- ``@scope:registry=<url>``         registry for one scope
- ``//host/path/:_authToken=<tok>`` token for a registry host
- ``_authToken=<tok>``              token for the default registry

``${VAR}`` references are expanded from the environment. Tokens are never
logged.
"""

from dataclasses import dataclass, field
import logging
import os
from pathlib import Path
import re
from typing import Dict, List, Optional
from urllib.parse import urlparse

logger = logging.getLogger("pkgdocs-mcp.sources")

DEFAULT_NPM_REGISTRY = "https://registry.npmjs.org/"

_REGISTRY_LINE = re.compile(r"^(?:(@[^:]+):)?registry\s*=\s*(.+)$")
_TOKEN_LINE = re.compile(r"^(?://([^/]+)(?:/[^:]*)?/?:|(@[^:]+):)?_authToken\s*=\s*(.+)$")
_ENV_REF = re.compile(r"\$\{([^}]+)\}")


@dataclass(frozen=True)
class RegistryConfig:
    """Registry endpoint and optional bearer token for one package."""

    registry: str
    token: Optional[str] = None

    def __repr__(self) -> str:
        token = "[REDACTED]" if self.token else None
        return f"RegistryConfig(registry={self.registry!r}, token={token!r})"


@dataclass
class NpmrcSettings:
    """Merged settings from every ``.npmrc`` that was read."""

    default_registry: str = DEFAULT_NPM_REGISTRY
    scope_registries: Dict[str, str] = field(default_factory=dict)
    host_tokens: Dict[str, str] = field(default_factory=dict)
    default_token: Optional[str] = None

    def config_for(self, package_name: str) -> RegistryConfig:
        registry = self.default_registry
        if package_name.startswith("@") and "/" in package_name:
            scope = package_name.split("/", 1)[0]
            registry = self.scope_registries.get(scope, registry)

        token = self.host_tokens.get(_host(registry))
        if token is None and registry == self.default_registry:
            token = self.default_token
        return RegistryConfig(registry=_with_trailing_slash(registry), token=token)


def _expand_env(value: str) -> str:
    return _ENV_REF.sub(lambda m: os.environ.get(m.group(1), ""), value)


def _host(url: str) -> str:
    parsed = urlparse(url if "://" in url else f"https://{url}")
    return parsed.netloc


def _with_trailing_slash(url: str) -> str:
    return url if url.endswith("/") else url + "/"


def parse_npmrc(content: str, settings: Optional[NpmrcSettings] = None) -> NpmrcSettings:
    """Merge one ``.npmrc`` file's content into ``settings``.

    Example:
        >>> s = parse_npmrc("@acme:registry=https://npm.acme.dev/\\n//npm.acme.dev/:_authToken=abc")
        >>> s.config_for("@acme/widgets").registry
        'https://npm.acme.dev/'
    """
    settings = settings or NpmrcSettings()
    for raw_line in content.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or line.startswith(";"):
            continue

        match = _REGISTRY_LINE.match(line)
        if match:
            scope, value = match.group(1), _expand_env(match.group(2).strip())
            if scope:
                settings.scope_registries[scope] = value
            else:
                settings.default_registry = value
            continue

        match = _TOKEN_LINE.match(line)
        if match:
            host, scope, value = match.group(1), match.group(2), _expand_env(match.group(3).strip())
            if host:
                settings.host_tokens[host] = value
            elif scope:
                scope_registry = settings.scope_registries.get(scope)
                if scope_registry:
                    settings.host_tokens[_host(scope_registry)] = value
            else:
                settings.default_token = value

    return settings


def npmrc_candidates(project_path: Optional[str] = None) -> List[Path]:
    """``.npmrc`` paths in the order they are applied.

    The home file comes first, then one file per directory from the
    filesystem root down to the project directory (cwd when not given), so
    the file closest to the project wins.
    """
    project = Path(project_path) if project_path else Path.cwd()
    project = project.expanduser().resolve()
    directories = list(reversed(project.parents)) + [project]
    return [Path.home() / ".npmrc"] + [directory / ".npmrc" for directory in directories]


def load_registry_config(package_name: str, project_path: Optional[str] = None) -> RegistryConfig:
    """Resolve the registry endpoint and token for ``package_name``.

    Unreadable files are skipped with a warning.
    """
    settings = NpmrcSettings()
    for path in npmrc_candidates(project_path):
        if not path.is_file():
            continue
        try:
            parse_npmrc(path.read_text(encoding="utf-8"), settings)
        except OSError as exc:
            logger.warning("Skipping unreadable %s: %s", path, exc)
            continue
        logger.debug("Loaded npm settings from %s", path)

    config = settings.config_for(package_name)
    logger.debug("Registry for %s: %r", package_name, config)
    return config
