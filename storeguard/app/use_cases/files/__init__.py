"""
File Access Use Cases

Authorized, time-limited delivery of purchased files.
"""

from .list_order_files_use_case import ListOrderFilesUseCase
from .get_download_url_use_case import GetDownloadUrlUseCase
from .dtos import DownloadUrlResponse, FileInfo

__all__ = [
    "ListOrderFilesUseCase",
    "GetDownloadUrlUseCase",
    "DownloadUrlResponse",
    "FileInfo",
]
