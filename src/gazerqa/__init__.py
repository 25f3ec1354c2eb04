"""gazerqa: Recurrence Quantification Analysis of gaze fixation sequences.

- data: fixation model, CSV/JSON ingestion, synthetic scanpaths
- rqa: recurrence matrices, line scans and metrics
- orchestrator: batch, windowed and parameter-sweep runs
- cli: JSON report on stdout
"""

from __future__ import annotations

__version__ = "0.1.0"
