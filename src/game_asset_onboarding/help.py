"""Static help shown from the onboarding wizard."""

from dataclasses import dataclass

from .core.errors import ConnectionFailed, NoDevicesFound, ResolutionError
from .core.job import ExtractionError, GenericFailure, MissingFiles


@dataclass(frozen=True)
class HelpTopic:
    id: str
    title: str
    content: str


GETTING_STARTED = HelpTopic(
    id="getting-started",
    title="Getting Started",
    content=(
        "You need the original game files from your own copy of Diablo II. "
        "Point the installer at the folder that contains d2data.mpq, either on "
        "this device, on a USB drive, or on a network share."
    ),
)

MISSING_FILES = HelpTopic(
    id="missing-files",
    title="Missing Game Files",
    content=(
        "Some required .mpq archives were not found. Copy every .mpq file from "
        "your Diablo II installation folder (including the Lord of Destruction "
        "expansion's d2exp.mpq) into one folder and choose that folder again. "
        "Files from the installation CD may need to be copied from the disc."
    ),
)

USB_STORAGE = HelpTopic(
    id="usb-storage",
    title="USB Storage",
    content=(
        "Connect the drive and make sure it is mounted before choosing USB "
        "storage. Drives formatted as FAT32 or exFAT work best."
    ),
)

NETWORK = HelpTopic(
    id="network",
    title="Network Locations",
    content=(
        "Check that the host name is correct, the share exists, and this device "
        "is on the same network. Leave the username empty for guest access."
    ),
)

TROUBLESHOOTING = HelpTopic(
    id="troubleshooting",
    title="Troubleshooting",
    content=(
        "Extraction needs enough free space for all archives (about 2 GB) and "
        "read access to the source folder. Placeholder or damaged archives are "
        "rejected; copy them again from the original installation."
    ),
)

TOPICS: dict[str, HelpTopic] = {
    topic.id: topic for topic in (GETTING_STARTED, MISSING_FILES, USB_STORAGE, NETWORK, TROUBLESHOOTING)
}


def topic_for_error(error: ExtractionError | ResolutionError | None) -> HelpTopic:
    """Pick the most useful topic for the error currently shown."""
    if isinstance(error, MissingFiles):
        return MISSING_FILES
    if isinstance(error, NoDevicesFound):
        return USB_STORAGE
    if isinstance(error, ConnectionFailed):
        return NETWORK
    if isinstance(error, (GenericFailure, ResolutionError)):
        return TROUBLESHOOTING
    return GETTING_STARTED


def get_topic(topic_id: str) -> HelpTopic:
    """Look up a topic by id.

    Raises:
        KeyError: If no topic has that id
    """
    if topic_id not in TOPICS:
        raise KeyError(f"No help topic found with id: {topic_id}")
    return TOPICS[topic_id]
