"""Record <-> database model transformers."""

from scuba_log_server.transformers.dive import DiveTransformer

__all__ = ["DiveTransformer"]
