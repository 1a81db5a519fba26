"""Probes for the project's license file."""

from pathlib import PurePosixPath

from repotrust.models.raw import LicenseData
from repotrust.models.results import Finding, Location, Outcome

HAS_LICENSE_FILE = "hasLicenseFile"
HAS_LICENSE_FILE_AT_TOP_DIR = "hasLicenseFileAtTopDir"
HAS_FSF_OR_OSI_APPROVED_LICENSE = "hasFSFOrOSIApprovedLicense"

SPDX_KEY = "spdxID"

LICENSES_DIR = "LICENSES"


def is_top_level(path: str) -> bool:
    """Top-level files and the REUSE `LICENSES/` directory both count."""
    parts = PurePosixPath(path).parts
    return len(parts) == 1 or parts[0] == LICENSES_DIR


def _no_license(probe: str) -> list[Finding]:
    return [Finding(probe=probe, outcome=Outcome.NOT_APPLICABLE, message="no license file found")]


def has_license_file(raw: LicenseData) -> list[Finding]:
    if not raw.license_files:
        return [
            Finding(probe=HAS_LICENSE_FILE, outcome=Outcome.FALSE, message="no license file found")
        ]
    return [
        Finding(
            probe=HAS_LICENSE_FILE,
            outcome=Outcome.TRUE,
            message=f"license file found: {lf.file.path}",
            location=Location.from_file(lf.file),
        )
        for lf in raw.license_files
    ]


def has_license_file_at_top_dir(raw: LicenseData) -> list[Finding]:
    if not raw.license_files:
        return _no_license(HAS_LICENSE_FILE_AT_TOP_DIR)
    for lf in raw.license_files:
        if is_top_level(lf.file.path):
            return [
                Finding(
                    probe=HAS_LICENSE_FILE_AT_TOP_DIR,
                    outcome=Outcome.TRUE,
                    message="license file found in expected location",
                    location=Location.from_file(lf.file),
                )
            ]
    first = raw.license_files[0]
    return [
        Finding(
            probe=HAS_LICENSE_FILE_AT_TOP_DIR,
            outcome=Outcome.FALSE,
            message="license file found in unexpected location",
            location=Location.from_file(first.file),
        )
    ]


def has_fsf_or_osi_approved_license(raw: LicenseData) -> list[Finding]:
    if not raw.license_files:
        return _no_license(HAS_FSF_OR_OSI_APPROVED_LICENSE)
    for lf in raw.license_files:
        if lf.approved:
            return [
                Finding(
                    probe=HAS_FSF_OR_OSI_APPROVED_LICENSE,
                    outcome=Outcome.TRUE,
                    message=f"FSF or OSI recognized license: {lf.spdx_id}",
                    values={SPDX_KEY: lf.spdx_id},
                    location=Location.from_file(lf.file),
                )
            ]
    return [
        Finding(
            probe=HAS_FSF_OR_OSI_APPROVED_LICENSE,
            outcome=Outcome.FALSE,
            message="license not recognized as FSF or OSI approved",
        )
    ]


PROBES = (has_license_file, has_license_file_at_top_dir, has_fsf_or_osi_approved_license)
