"""
Photo Drive - Provision and clean up Google Drive folders for photo distribution.

Import from submodules directly:
    from photodrive.config import AppConfig
    from photodrive.drive import DriveClient, OAuthSession
    from photodrive.provision import ResourceProvisioner, DistributionUploader
    from photodrive.cleanup import RetentionCleaner
"""

__version__ = "0.3.0"
