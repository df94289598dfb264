"""
Folder provisioning and upload workflows.
"""

from .provisioner import ResourceProvisioner
from .uploader import (
    ArchiveUpload,
    DistributionUploader,
    ModelUpload,
    UploadReport,
    collect_archive_uploads,
    collect_model_uploads,
    delete_local_archives,
    event_folder_name,
    event_folder_name_for_dir,
)

__all__ = [
    "ResourceProvisioner",
    "ArchiveUpload",
    "DistributionUploader",
    "ModelUpload",
    "UploadReport",
    "collect_archive_uploads",
    "collect_model_uploads",
    "delete_local_archives",
    "event_folder_name",
    "event_folder_name_for_dir",
]
