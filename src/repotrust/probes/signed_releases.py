"""Probes for signature and provenance files among release assets."""

from repotrust.models.evidence import Release, ReleaseAsset
from repotrust.models.raw import FileType, SignedReleasesData
from repotrust.models.results import Finding, Location, Outcome

RELEASES_ARE_SIGNED = "releasesAreSigned"
RELEASES_HAVE_PROVENANCE = "releasesHaveProvenance"

RELEASE_NAME_KEY = "releaseName"
ASSET_NAME_KEY = "assetName"

SIGNATURE_EXTENSIONS = (".minisig", ".asc", ".sig", ".sign", ".sigstore", ".sigstore.json")
PROVENANCE_EXTENSIONS = (".intoto.jsonl",)


def _first_asset(release: Release, extensions: tuple[str, ...]) -> ReleaseAsset | None:
    for asset in release.assets:
        if asset.name.lower().endswith(extensions):
            return asset
    return None


def _per_release(
    probe: str,
    raw: SignedReleasesData,
    extensions: tuple[str, ...],
    kind: str,
) -> list[Finding]:
    if not raw.releases:
        return [Finding(probe=probe, outcome=Outcome.NOT_APPLICABLE, message="no releases found")]

    findings = []
    for release in raw.releases:
        asset = _first_asset(release, extensions)
        if asset is None:
            findings.append(
                Finding(
                    probe=probe,
                    outcome=Outcome.FALSE,
                    message=f"release artifact {release.tag_name} does not have {kind}",
                    values={RELEASE_NAME_KEY: release.tag_name},
                )
            )
            continue
        findings.append(
            Finding(
                probe=probe,
                outcome=Outcome.TRUE,
                message=f"{kind} file found: {asset.name}",
                values={RELEASE_NAME_KEY: release.tag_name, ASSET_NAME_KEY: asset.name},
                location=Location(path=asset.url or asset.name, type=FileType.URL),
            )
        )
    return findings


def releases_are_signed(raw: SignedReleasesData) -> list[Finding]:
    return _per_release(RELEASES_ARE_SIGNED, raw, SIGNATURE_EXTENSIONS, "signature")


def releases_have_provenance(raw: SignedReleasesData) -> list[Finding]:
    return _per_release(RELEASES_HAVE_PROVENANCE, raw, PROVENANCE_EXTENSIONS, "provenance")


PROBES = (releases_are_signed, releases_have_provenance)
