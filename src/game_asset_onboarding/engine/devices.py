"""Removable storage enumeration and network reachability probes."""

import ftplib
import logging
import socket
from pathlib import Path

import psutil
import requests

from .base import NetworkProtocol

logger = logging.getLogger(__name__)

# Mount points below these roots are treated as removable storage.
REMOVABLE_MOUNT_ROOTS: tuple[str, ...] = ("/media", "/run/media", "/mnt", "/storage")

# Pseudo and system filesystems that are never user storage.
IGNORED_FSTYPES = frozenset(
    {"proc", "sysfs", "tmpfs", "devtmpfs", "devpts", "cgroup", "cgroup2", "overlay", "squashfs"}
)

SMB_PORT = 445
DEVICE_RECORD_SEPARATOR = "|"


def format_device_record(path: str, label: str, total_space: int, free_space: int) -> str:
    """Encode a device as ``path|label|totalSpace|freeSpace``."""
    return DEVICE_RECORD_SEPARATOR.join([path, label, str(total_space), str(free_space)])


def _is_under(path: str, roots: tuple[str, ...]) -> bool:
    candidate = Path(path)
    return any(candidate != Path(root) and candidate.is_relative_to(root) for root in roots)


def _is_removable(partition, roots: tuple[str, ...]) -> bool:
    # Windows reports drive type in opts ("rw,removable"); POSIX mounts are
    # recognised by where they are mounted.
    if "removable" in partition.opts.split(","):
        return True
    return _is_under(partition.mountpoint, roots)


def _usage_record(mount_point: str) -> str:
    try:
        usage = psutil.disk_usage(mount_point)
        total, free = usage.total, usage.free
    except OSError as e:
        logger.debug("Cannot read usage of %s: %s", mount_point, e)
        total, free = 0, 0
    label = Path(mount_point).name or mount_point
    return format_device_record(mount_point, label, total, free)


def enumerate_removable_storage(roots: tuple[str, ...] = REMOVABLE_MOUNT_ROOTS) -> list[str]:
    """List removable storage as delimited device records.

    Physical partitions reported by psutil are kept when the OS flags them
    as removable or when they are mounted below one of ``roots``.

    Args:
        roots: Directories under which removable media get mounted

    Returns:
        Records in ``path|label|totalSpace|freeSpace`` format
    """
    seen: set[str] = set()
    records: list[str] = []

    for partition in psutil.disk_partitions(all=False):
        if partition.fstype in IGNORED_FSTYPES:
            continue
        if not _is_removable(partition, roots):
            continue
        if partition.mountpoint in seen:
            continue
        seen.add(partition.mountpoint)
        records.append(_usage_record(partition.mountpoint))

    return records


def probe_network(
    protocol: NetworkProtocol,
    host: str,
    share: str,
    username: str = "",
    password: str = "",
    timeout: float = 5.0,
) -> bool:
    """Check that a network location is reachable with the given credential.

    Args:
        protocol: Protocol to connect with
        host: Host name or IP address
        share: Share name (SMB), directory (FTP) or URL path (HTTP)
        username: Login name; empty means anonymous
        password: Login password
        timeout: Seconds to wait before giving up

    Returns:
        True if the connection succeeded
    """
    if protocol is NetworkProtocol.SMB:
        return _probe_smb(host, timeout)
    if protocol is NetworkProtocol.FTP:
        return _probe_ftp(host, share, username, password, timeout)
    return _probe_http(host, share, username, password, timeout)


def _probe_smb(host: str, timeout: float) -> bool:
    try:
        with socket.create_connection((host, SMB_PORT), timeout=timeout):
            return True
    except OSError as e:
        logger.info("SMB host %s unreachable: %s", host, e)
        return False


def _probe_ftp(host: str, share: str, username: str, password: str, timeout: float) -> bool:
    try:
        with ftplib.FTP(host, timeout=timeout) as ftp:
            ftp.login(user=username or "anonymous", passwd=password)
            if share:
                ftp.cwd(share)
        return True
    except ftplib.all_errors as e:
        logger.info("FTP connection to %s failed: %s", host, e)
        return False


def _probe_http(host: str, share: str, username: str, password: str, timeout: float) -> bool:
    base = host if "://" in host else f"http://{host}"
    url = f"{base.rstrip('/')}/{share.strip('/')}" if share else base
    auth = (username, password) if username else None
    try:
        response = requests.head(url, auth=auth, timeout=timeout, allow_redirects=True)
    except requests.RequestException as e:
        logger.info("HTTP connection to %s failed: %s", url, e)
        return False
    if response.status_code >= 400:
        logger.info("HTTP connection to %s rejected with status %s", url, response.status_code)
        return False
    return True
