"""NuGet registry discovery and registry URL parsing."""

import logging
import posixpath
import re
import secrets
import xml.etree.ElementTree as ET
from typing import List, Optional
from urllib.parse import urlparse

from nuget_lock.fs import LocalFileSystem
from nuget_lock.models import Registry, RegistryInfo

logger = logging.getLogger(__name__)

DATASOURCE_ID = "nuget"
DEFAULT_REGISTRY_URLS = ["https://api.nuget.org/v3/index.json"]
NUGET_CONFIG_FILE_NAMES = ["nuget.config", "NuGet.config", "NuGet.Config"]

PROTOCOL_VERSION_FRAGMENT = re.compile(r"^protocolVersion=(\d+)$")
HTTP_URL = re.compile(r"^https?://", re.IGNORECASE)


def get_random_string() -> str:
    """Random key for a transient cache directory."""
    return secrets.token_hex(8)


def get_default_registries() -> List[Registry]:
    return [Registry(url=url) for url in DEFAULT_REGISTRY_URLS]


def parse_registry_url(registry_url: str) -> RegistryInfo:
    """
    Split a registry URL into the feed URL and its NuGet protocol version.

    A ``#protocolVersion=N`` fragment selects the protocol explicitly; without
    it, v3 service indexes (``.../index.json``) are v3 and everything else v2.
    """
    try:
        parsed = urlparse(registry_url)
    except ValueError as e:
        logger.debug(f"Failed to parse registry URL {registry_url}: {e}")
        return RegistryInfo(feed_url=registry_url, protocol_version=2)

    if not parsed.scheme or not parsed.netloc:
        logger.debug(f"Registry URL is not absolute: {registry_url}")
        return RegistryInfo(feed_url=registry_url, protocol_version=2)

    match = PROTOCOL_VERSION_FRAGMENT.match(parsed.fragment)
    if match:
        protocol_version = int(match.group(1))
    elif parsed.path.endswith("/index.json"):
        protocol_version = 3
    else:
        protocol_version = 2

    feed_url = parsed._replace(fragment="").geturl()
    return RegistryInfo(feed_url=feed_url, protocol_version=protocol_version)


async def find_nuget_config(package_file: str, fs: LocalFileSystem) -> Optional[str]:
    """Closest NuGet config file at or above the manifest, within the working tree."""
    directory = posixpath.dirname(package_file.lstrip("/"))
    while True:
        try:
            names = set(await fs.read_local_directory(directory))
        except OSError:
            names = set()
        for name in NUGET_CONFIG_FILE_NAMES:
            if name in names:
                return posixpath.join(directory, name) if directory else name
        if not directory:
            return None
        directory = posixpath.dirname(directory)


async def get_configured_registries(package_file: str, fs: LocalFileSystem) -> Optional[List[Registry]]:
    """
    Registries declared in the NuGet config file applying to a manifest.

    Args:
        package_file: Manifest path relative to the working tree
        fs: Working tree to search

    Returns:
        Registries in declaration order, or None when no config declares sources
    """
    config_name = await find_nuget_config(package_file, fs)
    if config_name is None:
        return None

    logger.debug(f"Found NuGet config file {config_name}")
    content = await fs.read_local_file(config_name, encoding="utf-8-sig")
    if content is None:
        return None
    try:
        tree = ET.fromstring(content)
    except ET.ParseError as e:
        logger.debug(f"Failed to parse NuGet config {config_name}: {e}")
        return None

    package_sources = tree.find("packageSources")
    if package_sources is None:
        return None

    registries = get_default_registries()
    for child in package_sources:
        if child.tag == "clear":
            logger.debug("Clearing registry URLs")
            registries = []
        elif child.tag == "add":
            url = child.get("value", "")
            if not HTTP_URL.match(url):
                logger.debug(f"Skipping local registry {url}")
                continue
            protocol_version = child.get("protocolVersion")
            if protocol_version:
                url += f"#protocolVersion={protocol_version}"
            logger.debug(f"Adding registry URL {url}")
            registries.append(Registry(url=url, name=child.get("key")))

    return registries
