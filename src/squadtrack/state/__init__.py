"""Process state layer.

In-memory stand-in for the host process service: it registers tracking
processes and records their status updates, results and failures.  The
update loop only talks to it through the :class:`ProcessSink` interface.
"""

from squadtrack.state.sink import FanoutSink, ProcessSink, StoreSink
from squadtrack.state.store import ProcessStore

__all__ = ["FanoutSink", "ProcessSink", "ProcessStore", "StoreSink"]
