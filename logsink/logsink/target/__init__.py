"""
Append target interfaces and implementations.

An append target is the remote object store a LogSink persists into. It
only needs three operations: read an object's size, create an empty
object, and append bytes at an expected offset.
"""

from abc import ABC, abstractmethod
from typing import Optional


class AppendTarget(ABC):
    """
    Abstract base class for append-only object stores.

    Implementations must reject an append whose expected offset does not
    equal the object's current size by raising OffsetMismatchError.
    """

    @abstractmethod
    def get_size(self, key: str) -> Optional[int]:
        """
        Get the current size of an object.

        Args:
            key: Object key

        Returns:
            Size in bytes, or None if the object does not exist

        Raises:
            AppendTargetError: If the size could not be determined
        """
        pass

    @abstractmethod
    def create(
        self,
        key: str,
        content_type: str,
        content_disposition: Optional[str] = None,
    ) -> None:
        """
        Create an empty object.

        Args:
            key: Object key
            content_type: Content-Type metadata for the object
            content_disposition: Optional Content-Disposition metadata

        Raises:
            CreateError: If the object could not be created
        """
        pass

    @abstractmethod
    def append_at(self, key: str, data: bytes, expected_offset: int) -> None:
        """
        Append a block of bytes to an object.

        Args:
            key: Object key
            data: Bytes to append
            expected_offset: Size the object must currently have

        Raises:
            ObjectNotFoundError: If the object does not exist
            OffsetMismatchError: If expected_offset is not the current size
            AppendError: For any other failure
        """
        pass


from logsink.target.memory import InMemoryAppendTarget  # noqa: E402
from logsink.target.s3 import S3AppendTarget  # noqa: E402

__all__ = ["AppendTarget", "InMemoryAppendTarget", "S3AppendTarget"]
