"""Factory for the process-wide signal source."""

from typing import Optional

from .signals import ProcessSignalSource


class SignalSourceFactory:
    """Hands out the signal source shared by every instance in the process.

    The operating system keeps a single handler table per process, so
    instances that are not given their own source must all use this one.
    """
    
    _source: Optional[ProcessSignalSource] = None
    
    @classmethod
    def get_process_source(cls) -> ProcessSignalSource:
        """Get or create the shared ProcessSignalSource."""
        if cls._source is None:
            cls._source = ProcessSignalSource()
        return cls._source
