from .io.capabilities import (
    HandleCapabilities,
    HealthReporting,
    Openable,
    Readable,
    ReadableHandle,
    ReadWriteHandle,
    Writable,
    WritableHandle,
    capabilities_of,
    is_file_like,
    is_openable,
    is_readable,
    is_writable,
    require_capabilities,
    require_file_like,
)
from .io.errors import (
    ClosedFileError,
    EndOfFileError,
    HandleCapabilityError,
    OpenError,
    ReadError,
    SmartFileError,
    WriteError,
)
from .io.file_stream import FileStream, InputFileStream, OutputFileStream
from .io.open_mode import OpenMode
from .io.release import DefaultReleasePolicy, ReleasePolicy, release_handle
from .io.scoped_file import (
    ScopedFile,
    ScopedReader,
    ScopedReadWriter,
    ScopedWriter,
    open_scoped_file,
    scoped_file,
)

__all__ = [
    "ClosedFileError",
    "DefaultReleasePolicy",
    "EndOfFileError",
    "FileStream",
    "HandleCapabilities",
    "HandleCapabilityError",
    "HealthReporting",
    "InputFileStream",
    "OpenError",
    "OpenMode",
    "Openable",
    "OutputFileStream",
    "ReadError",
    "ReadWriteHandle",
    "Readable",
    "ReadableHandle",
    "ReleasePolicy",
    "ScopedFile",
    "ScopedReadWriter",
    "ScopedReader",
    "ScopedWriter",
    "SmartFileError",
    "Writable",
    "WritableHandle",
    "WriteError",
    "capabilities_of",
    "is_file_like",
    "is_openable",
    "is_readable",
    "is_writable",
    "open_scoped_file",
    "release_handle",
    "require_capabilities",
    "require_file_like",
    "scoped_file",
]
