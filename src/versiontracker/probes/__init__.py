"""Version probes for capabilities, distributions, manifests, filenames and async operations."""

from versiontracker.probes.base import Probe, ProbeResult
from versiontracker.probes.capability import (
    CapabilityProbe,
    CapabilityRegistry,
    DistributionProbe,
    default_capabilities,
    reset_default_capabilities,
)
from versiontracker.probes.drain import AsyncDrainProbe, plugin_data_extractor
from versiontracker.probes.filename import FilenameConventionProbe, parse_convention_filename
from versiontracker.probes.manifest import (
    AttributeRule,
    EachAttributeRule,
    ExtractionRule,
    KeyRule,
    ManifestFileProbe,
    last_segment,
)

__all__ = [
    "AsyncDrainProbe",
    "AttributeRule",
    "CapabilityProbe",
    "CapabilityRegistry",
    "DistributionProbe",
    "EachAttributeRule",
    "ExtractionRule",
    "FilenameConventionProbe",
    "KeyRule",
    "ManifestFileProbe",
    "Probe",
    "ProbeResult",
    "default_capabilities",
    "last_segment",
    "parse_convention_filename",
    "plugin_data_extractor",
    "reset_default_capabilities",
]
