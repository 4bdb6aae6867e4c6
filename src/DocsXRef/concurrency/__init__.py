# === NAVMAP v1 ===
# {
#   "module": "DocsXRef.concurrency.__init__",
#   "purpose": "Concurrency helpers shared across DocsXRef components.",
#   "sections": []
# }
# === /NAVMAP ===

"""
Concurrency helpers shared across DocsXRef components.

Exposes :class:`AcquisitionGate`, the counting gate that bounds in-flight
acquisitions, and :func:`create_executor`, which builds the thread pool used
for fan-out downloads.
"""

from .executors import create_executor
from .gate import AcquisitionGate

__all__ = ["AcquisitionGate", "create_executor"]
