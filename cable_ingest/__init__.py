"""Cable route ingestion core.

Converts field survey exports (KML) and bill-of-quantities spreadsheets
into the application's typed data model:

- ``convert_kml``: KML text -> ``FeatureCollection`` of cable routes and markers
- ``convert_boq``: spreadsheet rows -> ``BoqData`` with a cost summary
- ``compute_statistics``: per-project route statistics
"""

from cable_ingest.converters.boq import convert_boq
from cable_ingest.converters.kml import convert_kml
from cable_ingest.core.config import IngestConfig
from cable_ingest.core.exceptions import IngestError
from cable_ingest.models.statistics import ProjectStatistics, compute_statistics

__version__ = "0.1.0"

__all__ = [
    "IngestConfig",
    "IngestError",
    "ProjectStatistics",
    "compute_statistics",
    "convert_boq",
    "convert_kml",
]
