from .base import BaseLogger


class SilentLogger(BaseLogger):
    """Logger used when the host runs with logging disabled.

    Leaves the global loguru configuration untouched and drops every message.
    """

    def log_signal(self, signal_name: str):
        pass

    def log_phase(self, phase: str, handler_count: int):
        pass

    def log_error(self, message: str):
        pass

    def log_warning(self, message: str):
        pass

    def log_info(self, message: str):
        pass

    def log_debug(self, message: str):
        pass
