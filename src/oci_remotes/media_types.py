"""
OCI media types and constants.

Single source of truth for the manifest types sent in Accept headers.
"""
from __future__ import annotations

OCI_IMAGE_MANIFEST = "application/vnd.oci.image.manifest.v1+json"
OCI_IMAGE_INDEX = "application/vnd.oci.image.index.v1+json"
OCI_ARTIFACT_MANIFEST = "application/vnd.oci.artifact.manifest.v1+json"
DOCKER_MANIFEST_V2 = "application/vnd.docker.distribution.manifest.v2+json"
DOCKER_MANIFEST_LIST = "application/vnd.docker.distribution.manifest.list.v2+json"

# Order matters: first entry is preferred
ACCEPTED_MANIFEST_TYPES = [
    OCI_IMAGE_MANIFEST,
    OCI_IMAGE_INDEX,
    OCI_ARTIFACT_MANIFEST,
    DOCKER_MANIFEST_V2,
    DOCKER_MANIFEST_LIST,
]

# Header carrying the canonical digest of manifests and blobs
DIGEST_HEADER = "Docker-Content-Digest"


__all__ = [
    "OCI_IMAGE_MANIFEST",
    "OCI_IMAGE_INDEX",
    "OCI_ARTIFACT_MANIFEST",
    "DOCKER_MANIFEST_V2",
    "DOCKER_MANIFEST_LIST",
    "ACCEPTED_MANIFEST_TYPES",
    "DIGEST_HEADER",
]
