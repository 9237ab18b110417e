from __future__ import annotations

# Pure Pydantic v2 models for the flowlens engine. No I/O happens in this package
# except in transaction_io, which callers use explicitly.
