"""License: a recognised license file in the repository."""

import logging
import re
from pathlib import PurePosixPath

from repotrust.checker.registry import Pipeline, Registration
from repotrust.checker.request import CheckRequest
from repotrust.evaluation import license as evaluation
from repotrust.models.evidence import AccessMode
from repotrust.models.raw import File, FileType, LicenseData, LicenseFile
from repotrust.models.results import RiskLevel
from repotrust.probes import license as probes
from repotrust.probes.license import LICENSES_DIR

logger = logging.getLogger(__name__)

CHECK_NAME = "License"

# LICENSE, COPYING.md, LICENSE-MIT, MIT-LICENSE.txt, ...
_LICENSE_NAME = re.compile(
    r"^(?:(?P<pre>[0-9A-Za-z.+-]+?)[-_])?"
    r"(?P<kind>licen[sc]es?|copying|copyright|patents?)"
    r"(?:[-_](?P<suf>[0-9A-Za-z.+-]+?))?"
    r"(?P<ext>\.(?:adoc|asc|docx?|html|markdown|md|rst|txt|xml))?$",
    re.IGNORECASE,
)

_REUSE_NAME = re.compile(r"^(?P<suf>.+?)(?P<ext>\.[A-Za-z]+)?$")

NESTED_LICENSE_DIRS = ("docs", "doc", ".github")

_SPDX_TAG = re.compile(r"SPDX-License-Identifier:\s*([A-Za-z0-9.+-]+)")

# (required phrases, SPDX id) in order of specificity.
_TEXT_MARKERS: tuple[tuple[tuple[str, ...], str], ...] = (
    (("GNU AFFERO GENERAL PUBLIC LICENSE", "Version 3"), "AGPL-3.0"),
    (("GNU LESSER GENERAL PUBLIC LICENSE", "Version 3"), "LGPL-3.0"),
    (("GNU LESSER GENERAL PUBLIC LICENSE", "Version 2.1"), "LGPL-2.1"),
    (("GNU GENERAL PUBLIC LICENSE", "Version 3"), "GPL-3.0"),
    (("GNU GENERAL PUBLIC LICENSE", "Version 2"), "GPL-2.0"),
    (("Apache License", "Version 2.0"), "Apache-2.0"),
    (("Mozilla Public License", "2.0"), "MPL-2.0"),
    (("Eclipse Public License", "2.0"), "EPL-2.0"),
    (("Boost Software License",), "BSL-1.0"),
    (("CC0 1.0 Universal",), "CC0-1.0"),
    (("This is free and unencumbered software released into the public domain",), "Unlicense"),
    (("Redistribution and use in source and binary forms", "Neither the name"), "BSD-3-Clause"),
    (("Redistribution and use in source and binary forms",), "BSD-2-Clause"),
    (("Permission to use, copy, modify, and/or distribute this software for any purpose",), "ISC"),
    (("Permission is hereby granted, free of charge",), "MIT"),
)

# FSF free or OSI approved licenses, by upper-cased SPDX id.
APPROVED_LICENSES = frozenset(
    s.upper()
    for s in (
        "0BSD", "AFL-3.0", "AGPL-3.0", "AGPL-3.0-only", "AGPL-3.0-or-later", "Apache-1.1",
        "Apache-2.0", "APSL-2.0", "Artistic-2.0", "BSD-2-Clause", "BSD-3-Clause", "BSL-1.0",
        "CC0-1.0", "CDDL-1.0", "CPL-1.0", "ECL-2.0", "EPL-1.0", "EPL-2.0", "EUPL-1.1",
        "EUPL-1.2", "GPL-2.0", "GPL-2.0-only", "GPL-2.0-or-later", "GPL-3.0", "GPL-3.0-only",
        "GPL-3.0-or-later", "ISC", "LGPL-2.1", "LGPL-2.1-only", "LGPL-2.1-or-later",
        "LGPL-3.0", "LGPL-3.0-only", "LGPL-3.0-or-later", "MIT", "MIT-0", "MPL-1.1", "MPL-2.0",
        "MS-PL", "MS-RL", "NCSA", "OFL-1.1", "OSL-3.0", "PostgreSQL", "Python-2.0",
        "Unlicense", "UPL-1.0", "W3C", "WTFPL", "X11", "Zlib", "ZPL-2.1",
    )
)


def license_name_match(path: str) -> re.Match[str] | None:
    """Match ``path`` against license file naming conventions.

    Files at the top level, directly inside ``LICENSES/`` (named by SPDX id)
    or in one of the documentation directories qualify.
    """
    parts = PurePosixPath(path).parts
    if len(parts) == 2 and parts[0] == LICENSES_DIR:
        return _REUSE_NAME.match(parts[1])
    if len(parts) == 2 and parts[0] in NESTED_LICENSE_DIRS:
        return _LICENSE_NAME.match(parts[1])
    if len(parts) != 1:
        return None
    return _LICENSE_NAME.match(parts[0])


def is_license_file(path: str) -> bool:
    return license_name_match(path) is not None


def spdx_from_name(path: str) -> str:
    match = license_name_match(path)
    if match is None:
        return ""
    groups = match.groupdict()
    return groups.get("pre") or groups.get("suf") or ""


def spdx_from_text(text: str) -> str:
    tag = _SPDX_TAG.search(text)
    if tag:
        return tag.group(1)
    for phrases, spdx_id in _TEXT_MARKERS:
        if all(p in text for p in phrases):
            return spdx_id
    return ""


def is_approved(spdx_id: str) -> bool:
    return spdx_id.upper() in APPROVED_LICENSES


async def collect(req: CheckRequest) -> LicenseData:
    license_files = []
    for path in sorted(await req.evidence.files(is_license_file), key=lambda p: (p.count("/"), p)):
        spdx_id = spdx_from_name(path)
        if not is_approved(spdx_id):
            text_id = spdx_from_text(await req.evidence.file_text(path))
            spdx_id = text_id or spdx_id
        logger.debug(f"License file {path}: {spdx_id or 'unrecognised'}")
        license_files.append(
            LicenseFile(
                file=File(path=path, type=FileType.SOURCE),
                spdx_id=spdx_id,
                approved=is_approved(spdx_id),
            )
        )
    return LicenseData(license_files=tuple(license_files))


def registration() -> Registration:
    return Registration(
        name=CHECK_NAME,
        pipeline=Pipeline(collect, probes.PROBES, evaluation.evaluate),
        supported_modes=frozenset({AccessMode.FILE_BASED, AccessMode.COMMIT_BASED}),
        risk=RiskLevel.LOW,
        description="Determines if the project has defined a license.",
    )
