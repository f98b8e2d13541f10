"""ProManage - project tracking backend with Git README import and media folder sync."""

from promanage.descfile import DescriptionFile, parse_desc_file
from promanage.media import refresh
from promanage.models import GitCredentials, GitProvider, MediaItem, MediaType, ProjectRecord
from promanage.providers import fetch_readme_first_line, verify_git_connection
from promanage.service import ProManage

__version__ = "0.1.0"
__all__ = [
    "ProManage",
    "DescriptionFile",
    "GitCredentials",
    "GitProvider",
    "MediaItem",
    "MediaType",
    "ProjectRecord",
    "fetch_readme_first_line",
    "parse_desc_file",
    "refresh",
    "verify_git_connection",
]
