from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class ImporterCapabilities:
    """What an importer supports.

    Orchestration code consults this before attempting schema discovery,
    pagination or parallel import against an importer.
    """

    supports_streaming: bool = False
    supports_batching: bool = False
    supports_filtering: bool = False
    supports_sorting: bool = False
    supports_pagination: bool = False
    supports_schema_discovery: bool = False
    supports_incremental_import: bool = False
    supports_parallel_import: bool = False
    supports_resume_import: bool = False
    supports_authentication: bool = False
    supports_encryption: bool = False
    supports_compression: bool = False
    max_batch_size: int = 0
    max_parallel_imports: int = 1
    supported_data_formats: Tuple[str, ...] = ()
    supported_authentication_methods: Tuple[str, ...] = ()
    supported_encryption_methods: Tuple[str, ...] = ()
    supported_compression_methods: Tuple[str, ...] = ()
