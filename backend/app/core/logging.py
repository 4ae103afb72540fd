import logging

_CONFIGURED = False
_DEFAULT_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"


def setup_logging(level: str = "INFO") -> None:
    """Configure the root logger once."""
    global _CONFIGURED
    if _CONFIGURED:
        return
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=_DEFAULT_FORMAT)
    _CONFIGURED = True
