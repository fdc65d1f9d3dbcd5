"""
File Access Use Case DTOs

Serialized with camelCase keys.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class FileInfo(BaseModel):
    """A downloadable file in an order; never carries a link or storage key"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    file_id: str
    file_name: str
    file_type: str


class DownloadUrlResponse(BaseModel):
    """A freshly minted, short-lived download link"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    download_url: str
    expires_in: int
