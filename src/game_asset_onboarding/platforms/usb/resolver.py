"""USB storage resolver.

The engine reports removable devices as ``path|label|total|free`` strings.
They are parsed here into ``UsbDevice`` descriptors; nothing past this
module sees the raw format.
"""

import logging
from typing import Callable, Sequence

from ...core.errors import NoDevicesFound, NoSelection
from ...engine.base import ExtractionEngine
from ...sources.base import Resolver, Source, SourceKind, UsbDevice

logger = logging.getLogger(__name__)

RECORD_SEPARATOR = "|"

DeviceChooser = Callable[[Sequence[UsbDevice]], UsbDevice | None]


def _parse_size(value: str) -> int:
    try:
        return max(int(value.strip()), 0)
    except ValueError:
        return 0


def parse_device_record(record: str) -> UsbDevice | None:
    """Parse one ``path|label|totalSpace|freeSpace`` record.

    Records need at least a path and a label; missing or non-numeric sizes
    become 0.

    Args:
        record: Raw record from the engine

    Returns:
        UsbDevice, or None if the record is malformed
    """
    fields = record.split(RECORD_SEPARATOR)
    if len(fields) < 2:
        return None

    path = fields[0].strip()
    if not path:
        return None

    label = fields[1].strip()
    total = _parse_size(fields[2]) if len(fields) > 2 else 0
    free = _parse_size(fields[3]) if len(fields) > 3 else 0
    return UsbDevice(path=path, label=label, total_space=total, free_space=free)


def parse_device_records(records: Sequence[str]) -> list[UsbDevice]:
    """Parse device records, skipping malformed ones."""
    devices = []
    for record in records:
        device = parse_device_record(record)
        if device is None:
            logger.debug("Skipping malformed device record: %r", record)
            continue
        devices.append(device)
    return devices


class UsbResolver(Resolver):
    """Resolver for removable USB storage."""

    kind = SourceKind.USB

    def __init__(self, engine: ExtractionEngine):
        self.engine = engine

    def list_devices(self) -> list[UsbDevice]:
        """Enumerate removable devices.

        Raises:
            NoDevicesFound: If the engine reports no usable device
        """
        devices = parse_device_records(self.engine.list_usb_devices())
        if not devices:
            raise NoDevicesFound("No USB storage devices found")
        return devices

    def resolve(
        self,
        device: UsbDevice | str | None = None,
        chooser: DeviceChooser | None = None,
        **params: object,
    ) -> Source:
        """Resolve a USB device into a Source.

        The device is given directly (as a descriptor or mount path) or
        picked by ``chooser`` from the enumerated set.

        Args:
            device: Device descriptor or mount path
            chooser: Callback presenting the devices and returning the choice

        Returns:
            Source with kind=usb and the device's mount path

        Raises:
            NoDevicesFound: If no device is available
            NoSelection: If no device was chosen or it is not in the set
        """
        devices = self.list_devices()

        if device is None and chooser is not None:
            device = chooser(devices)

        if device is None:
            raise NoSelection("No USB device was selected")

        wanted = device.path if isinstance(device, UsbDevice) else str(device)
        for candidate in devices:
            if candidate.path == wanted:
                logger.info("Selected USB device %s (%s)", candidate.path, candidate.label)
                return Source(kind=SourceKind.USB, path=candidate.path)

        raise NoSelection(f"USB device is not available: {wanted}")
