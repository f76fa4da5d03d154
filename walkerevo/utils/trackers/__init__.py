from walkerevo.utils.trackers.base import LogWriter, NullWriter
from walkerevo.utils.trackers.tensorboard import TBWriter

__all__ = ["LogWriter", "NullWriter", "TBWriter"]
