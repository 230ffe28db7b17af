import logging
import sys
import traceback


def exc_to_text(e: Exception) -> str:
    tb = "".join(traceback.format_exception(type(e), e, e.__traceback__))
    return f"{type(e).__name__}: {e}\n{tb}"


def configure_logging(verbose: bool = False) -> None:
    """Send diagnostics to stderr; stdout is reserved for the report."""
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    root = logging.getLogger("compliance_validator")
    root.handlers[:] = [handler]
    root.setLevel(logging.DEBUG if verbose else logging.INFO)
    # the SDK logs every HTTP request at INFO
    logging.getLogger("azure").setLevel(logging.WARNING)
